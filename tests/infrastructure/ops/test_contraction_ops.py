# tests/infrastructure/ops/test_contraction_ops.py
"""
Unit tests for `dot` and `outer`, checked against NumPy matmul and
tensordot, including batch axes and shape mismatch errors.
"""

from unittest import TestCase
import unittest

import numpy as np

from keybin.domain import F32, F64, S32, U8, ArrayData, ShapeMismatchError
from keybin.infrastructure.codec import decode_all
from keybin.infrastructure.ops import dot, outer


class _ContractionMixin:
    def _values(self, out: ArrayData) -> np.ndarray:
        return np.array(decode_all(out.buffer, out.dtype)).reshape(out.shape)

    def _f64(self, arr: np.ndarray):
        arr = np.asarray(arr, dtype="<f8")
        return arr.shape, F64, arr.tobytes()


class TestDot(TestCase, _ContractionMixin):
    def test_matmul_u8(self):
        a = np.arange(6, dtype="<u1").reshape(2, 3)
        b = np.arange(6, dtype="<u1").reshape(3, 2)
        out = dot(a.shape, U8, a.tobytes(), (1,), b.shape, U8, b.tobytes(), (0,))
        self.assertEqual(out.shape, (2, 2))
        self.assertEqual(out.dtype, U8)
        self.assertEqual(list(out.buffer), [10, 13, 28, 40])

    def test_matmul_matches_numpy(self):
        a = np.random.randn(4, 3)
        b = np.random.randn(3, 5)
        out = dot(*self._f64(a), (1,), *self._f64(b), (0,))
        np.testing.assert_allclose(self._values(out), a @ b, rtol=1e-10, atol=1e-12)

    def test_tensordot_multiple_axes(self):
        a = np.random.randn(2, 3, 4)
        b = np.random.randn(4, 3, 2)
        out = dot(*self._f64(a), (1, 2), *self._f64(b), (1, 0))
        expected = np.tensordot(a, b, axes=([1, 2], [1, 0]))
        np.testing.assert_allclose(self._values(out), expected, rtol=1e-10, atol=1e-12)

    def test_negative_axes(self):
        a = np.random.randn(3, 4)
        b = np.random.randn(5, 4)
        out = dot(*self._f64(a), (-1,), *self._f64(b), (-1,))
        np.testing.assert_allclose(self._values(out), a @ b.T, rtol=1e-10, atol=1e-12)

    def test_batched_matmul(self):
        a = np.random.randn(3, 2, 4)
        b = np.random.randn(3, 4, 5)
        out = dot(
            *self._f64(a), (2,), *self._f64(b), (1,),
            batch_axes1=(0,), batch_axes2=(0,),
        )
        self.assertEqual(out.shape, (3, 2, 5))
        np.testing.assert_allclose(self._values(out), a @ b, rtol=1e-10, atol=1e-12)

    def test_batch_axis_not_leading(self):
        a = np.random.randn(2, 6, 3)   # (m, batch, k)
        b = np.random.randn(3, 6)      # (k, batch)
        out = dot(
            *self._f64(a), (2,), *self._f64(b), (0,),
            batch_axes1=(1,), batch_axes2=(1,),
        )
        expected = np.einsum("mbk,kb->bm", a, b)
        self.assertEqual(out.shape, (6, 2))
        np.testing.assert_allclose(self._values(out), expected, rtol=1e-10, atol=1e-12)

    def test_type_promotion(self):
        a = np.array([[1, 2]], dtype="<i4")
        b = np.array([[0.5], [0.25]], dtype="<f4")
        out = dot(a.shape, S32, a.tobytes(), (1,), b.shape, F32, b.tobytes(), (0,))
        self.assertEqual(out.dtype, F32)
        self.assertEqual(decode_all(out.buffer, F32), [1.0])

    def test_contracted_extent_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            dot(*self._f64(np.zeros((2, 3))), (1,), *self._f64(np.zeros((4, 2))), (0,))

    def test_batch_extent_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            dot(
                *self._f64(np.zeros((2, 3))), (1,), *self._f64(np.zeros((3, 3))), (0,),
                batch_axes1=(0,), batch_axes2=(1,),
            )

    def test_batch_axis_count_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            dot(
                *self._f64(np.zeros((2, 3))), (1,), *self._f64(np.zeros((2, 3))), (1,),
                batch_axes1=(0,),
            )


class TestOuter(TestCase, _ContractionMixin):
    def test_outer_u8(self):
        out = outer((1, 2), U8, bytes([1, 2]), (2, 1), U8, bytes([3, 4]))
        self.assertEqual(out.shape, (2, 2))
        self.assertEqual(list(out.buffer), [3, 4, 6, 8])

    def test_outer_matches_numpy(self):
        a = np.random.randn(2, 3)
        b = np.random.randn(4)
        out = outer(*self._f64(a), *self._f64(b))
        np.testing.assert_allclose(self._values(out), np.outer(a, b), rtol=1e-12)


if __name__ == "__main__":
    unittest.main()
