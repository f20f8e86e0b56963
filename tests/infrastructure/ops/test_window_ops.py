# tests/infrastructure/ops/test_window_ops.py
"""
Unit tests for sliding-window reductions.

Pooling results are compared against a brute-force NumPy reference over
strided and dilated windows.
"""

from unittest import TestCase
import unittest

import numpy as np

from keybin.domain import F32, F64, S32, ArrayData
from keybin.infrastructure.codec import decode_all
from keybin.infrastructure.ops import (
    window_max,
    window_mean,
    window_min,
    window_reduce,
    window_reduce_named,
    window_sum,
)


def pool2d_ref(x: np.ndarray, k, s, d=(1, 1), op=np.max) -> np.ndarray:
    """Python-loop reference for 2D pooling with dilation (no padding)."""
    kh, kw = k
    sh, sw = s
    dh, dw = d
    H, W = x.shape
    span_h = (kh - 1) * dh + 1
    span_w = (kw - 1) * dw + 1
    Ho = (H - span_h) // sh + 1
    Wo = (W - span_w) // sw + 1
    y = np.empty((Ho, Wo), dtype=np.float64)
    for i in range(Ho):
        for j in range(Wo):
            patch = x[i * sh : i * sh + span_h : dh, j * sw : j * sw + span_w : dw]
            y[i, j] = op(patch)
    return y


class _WindowMixin:
    def _values(self, out: ArrayData) -> np.ndarray:
        return np.array(decode_all(out.buffer, out.dtype)).reshape(out.shape)

    def _f64(self, arr: np.ndarray):
        arr = np.asarray(arr, dtype="<f8")
        return arr.shape, F64, arr.tobytes()


class TestWindowPooling(TestCase, _WindowMixin):
    def setUp(self):
        rng = np.random.default_rng(21)
        self.x = rng.standard_normal((7, 8))

    def test_max_pool(self):
        out = window_max(*self._f64(self.x), (2, 2), (2, 2))
        self.assertEqual(out.shape, (3, 4))
        np.testing.assert_array_equal(self._values(out), pool2d_ref(self.x, (2, 2), (2, 2)))

    def test_overlapping_windows(self):
        out = window_sum(*self._f64(self.x), (3, 2), (1, 2))
        np.testing.assert_allclose(
            self._values(out), pool2d_ref(self.x, (3, 2), (1, 2), op=np.sum), rtol=1e-12, atol=1e-12
        )

    def test_min_and_mean(self):
        out = window_min(*self._f64(self.x), (2, 3), 1)
        np.testing.assert_array_equal(self._values(out), pool2d_ref(self.x, (2, 3), (1, 1), op=np.min))
        out = window_mean(*self._f64(self.x), (2, 2), 2)
        np.testing.assert_allclose(
            self._values(out), pool2d_ref(self.x, (2, 2), (2, 2), op=np.mean), rtol=1e-12, atol=1e-12
        )

    def test_dilated_window(self):
        out = window_max(*self._f64(self.x), (2, 2), (1, 1), (2, 3))
        np.testing.assert_array_equal(
            self._values(out), pool2d_ref(self.x, (2, 2), (1, 1), (2, 3))
        )

    def test_window_larger_than_input(self):
        out = window_sum(*self._f64(self.x), (8, 2), 1)
        self.assertEqual(out.shape, (0, 7))
        self.assertEqual(out.buffer, b"")

    def test_one_dimensional(self):
        x = np.array([1, 4, 2, 8, 5, 7], dtype="<i4")
        out = window_max(x.shape, S32, x.tobytes(), (3,), 3)
        self.assertEqual(decode_all(out.buffer, S32), [4, 8])

    def test_mean_of_integers_is_float(self):
        x = np.array([1, 2, 3, 4], dtype="<i4")
        out = window_mean(x.shape, S32, x.tobytes(), (2,), 2)
        self.assertEqual(out.dtype, F32)
        self.assertEqual(decode_all(out.buffer, F32), [1.5, 3.5])

    def test_named_dispatch(self):
        a = window_reduce_named("max", *self._f64(self.x), (2, 2), 2)
        b = window_max(*self._f64(self.x), (2, 2), 2)
        self.assertEqual(a, b)

    def test_custom_window_fold(self):
        out = window_reduce(
            *self._f64(self.x), (2, 2), 2,
            init=0.0, fn=lambda v, acc: acc + v * v, finalize=lambda acc, n: acc / n,
        )
        np.testing.assert_allclose(
            self._values(out),
            pool2d_ref(self.x, (2, 2), (2, 2), op=lambda p: np.mean(p * p)),
            rtol=1e-12,
            atol=1e-12,
        )


if __name__ == "__main__":
    unittest.main()
