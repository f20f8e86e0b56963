# tests/infrastructure/interop/test_numpy_interop.py
"""
Unit tests for NumPy interop and base64 payload serialization.

These tests validate dtype mapping in both directions, the handling of
non-contiguous and big-endian arrays, ownership of the arrays returned by
`to_numpy`, and JSON round trips through `array_to_payload`.
"""

from unittest import TestCase
import json
import unittest

import numpy as np

from keybin.domain import (
    BF16,
    F16,
    F32,
    F64,
    S8,
    S64,
    U8,
    U16,
    ArrayData,
    ShapeMismatchError,
    UnsupportedTypeError,
)
from keybin.infrastructure.codec import decode_all, encode_many
from keybin.infrastructure.interop import (
    array_to_payload,
    from_numpy,
    numpy_dtype,
    payload_to_array,
    scalar_type_of,
    to_numpy,
)
from keybin.infrastructure.ops import transpose


class TestNumpyInterop(TestCase):
    def test_dtype_mapping(self):
        self.assertEqual(scalar_type_of(np.float32), F32)
        self.assertEqual(scalar_type_of(">i8"), S64)
        self.assertEqual(scalar_type_of(np.uint16), U16)
        self.assertEqual(scalar_type_of(np.bool_), U8)
        self.assertEqual(numpy_dtype(F16), np.dtype("<f2"))

    def test_unsupported_dtypes(self):
        with self.assertRaises(UnsupportedTypeError):
            scalar_type_of(np.complex64)
        with self.assertRaises(UnsupportedTypeError):
            numpy_dtype(BF16)

    def test_from_numpy(self):
        x = np.arange(6, dtype=np.int8).reshape(2, 3)
        data = from_numpy(x)
        self.assertEqual(data, ArrayData((2, 3), S8, x.tobytes()))

    def test_from_numpy_non_contiguous_and_big_endian(self):
        x = np.arange(12, dtype=">f8").reshape(3, 4).T
        data = from_numpy(x)
        self.assertEqual(data.shape, (4, 3))
        self.assertEqual(data.dtype, F64)
        self.assertEqual(decode_all(data.buffer, F64), x.ravel().tolist())

    def test_to_numpy_owns_memory(self):
        buf = encode_many([1.0, 2.0, 3.0, 4.0], F32)
        arr = to_numpy((2, 2), F32, buf)
        self.assertTrue(arr.flags["OWNDATA"])
        self.assertTrue(arr.flags["WRITEABLE"])
        arr[0, 0] = 9.0
        self.assertEqual(decode_all(buf, F32)[0], 1.0)

    def test_to_numpy_checks_length(self):
        with self.assertRaises(ShapeMismatchError):
            to_numpy((3,), F32, bytes(8))

    def test_round_trip_through_operation(self):
        x = np.random.randn(3, 5).astype(np.float32)
        out = transpose(*from_numpy(x))
        np.testing.assert_array_equal(to_numpy(*out), x.T)


class TestPayload(TestCase):
    def test_payload_is_json_safe(self):
        data = ArrayData((2, 2), F32, encode_many([1.0, -2.0, 0.5, 8.0], F32))
        payload = json.loads(json.dumps(array_to_payload(data)))
        self.assertEqual(payload["dtype"], "f32")
        self.assertEqual(payload["shape"], [2, 2])
        self.assertEqual(payload_to_array(payload), data)

    def test_bf16_payload(self):
        data = ArrayData((3,), BF16, encode_many([1.0, 2.0, 3.0], BF16))
        self.assertEqual(payload_to_array(array_to_payload(data)), data)

    def test_corrupt_payload(self):
        payload = array_to_payload(ArrayData((2,), U8, b"\x01\x02"))
        payload["shape"] = [3]
        with self.assertRaises(ShapeMismatchError):
            payload_to_array(payload)


if __name__ == "__main__":
    unittest.main()
