# tests/infrastructure/view/test_traverser.py
"""
Unit tests for Traverser offset planning and buffer reads.

These tests validate visiting order for transformed shapes, sub-range
enumeration, grouping of reduced axes, and that every read or reduce
rejects offsets outside the source buffer.
"""

from unittest import TestCase
import unittest

import numpy as np

from keybin.domain import F32, S32, U8, IndexOutOfRangeError
from keybin.infrastructure.codec import decode_all, encode_many
from keybin.infrastructure.view import (
    Traverser,
    WeightedShape,
    aggregate,
    broadcast,
    build,
    reverse,
    transpose,
)


class TestTraverserOffsets(TestCase):
    def test_identity_visits_in_order(self):
        t = Traverser(build((2, 3)))
        self.assertEqual(list(t.indices()), [0, 1, 2, 3, 4, 5])
        self.assertTrue(t.is_identity())

    def test_byte_offsets_when_typed(self):
        t = Traverser(build((3,)), F32)
        self.assertEqual(list(t), [0, 4, 8])

    def test_transposed_order(self):
        t = Traverser(transpose(build((2, 3))))
        self.assertEqual(list(t.indices()), [0, 3, 1, 4, 2, 5])

    def test_sub_range_matches_full_iteration(self):
        t = Traverser(reverse(transpose(build((3, 4, 2))), (1,)))
        full = list(t.indices())
        self.assertEqual(list(t.indices(5, 17)), full[5:17])
        self.assertEqual(list(t.indices(0, 100)), full)

    def test_groups_put_reduced_axes_inside(self):
        t = Traverser(aggregate(build((2, 3)), (1,)))
        self.assertEqual(list(t.groups()), [[0, 1, 2], [3, 4, 5]])
        self.assertEqual(t.group_size, 3)
        self.assertEqual(t.count, 2)

    def test_zero_step_axis_repeats(self):
        t = Traverser(broadcast(build((2,)), (3, 2)))
        self.assertEqual(list(t.indices()), [0, 1, 0, 1, 0, 1])
        self.assertEqual(t.bounds(), (0, 1))

    def test_rank_zero(self):
        t = Traverser(build(()))
        self.assertEqual(list(t.indices()), [0])

    def test_empty_axis(self):
        t = Traverser(build((0, 3)))
        self.assertEqual(list(t.indices()), [])
        self.assertIsNone(t.bounds())

    def test_repr_mentions_dims(self):
        self.assertIn("dims=((2, 1),)", repr(Traverser(build((2,)))))


class TestTraverserReads(TestCase):
    def test_read_transposed(self):
        x = np.arange(12, dtype="<i4").reshape(3, 4)
        t = Traverser(transpose(build(x.shape)), S32)
        out = np.frombuffer(t.read(x.tobytes()), dtype="<i4")
        np.testing.assert_array_equal(out, x.T.ravel())

    def test_read_sub_range(self):
        x = np.arange(12, dtype="<i4").reshape(3, 4)
        t = Traverser(reverse(build(x.shape), None), S32)
        out = np.frombuffer(t.read(x.tobytes(), 2, 7), dtype="<i4")
        np.testing.assert_array_equal(out, x[::-1, ::-1].ravel()[2:7])

    def test_identity_read_is_copy_of_bytes(self):
        buf = bytearray(encode_many([1, 2, 3], U8))
        out = Traverser(build((3,)), U8).read(buf)
        self.assertIsInstance(out, bytes)
        buf[0] = 9
        self.assertEqual(out, b"\x01\x02\x03")

    def test_reduce_sums_groups(self):
        buf = encode_many(range(6), F32)
        t = Traverser(aggregate(build((2, 3)), (0,)), F32)
        self.assertEqual(t.reduce(buf, 0, lambda v, acc: acc + v), [3.0, 5.0, 7.0])

    def test_fold_on_decoded_values(self):
        t = Traverser(aggregate(build((2, 2)), None))
        self.assertEqual(t.fold([1, 2, 3, 4], 1, lambda v, acc: acc * v), [24])

    def test_read_without_type_fails(self):
        with self.assertRaises(TypeError):
            Traverser(build((2,))).read(b"\x00\x00")

    def test_check_bounds_rejects_short_buffer(self):
        t = Traverser(build((4,)), F32)
        with self.assertRaises(IndexOutOfRangeError):
            t.check_bounds(bytes(12))

    def test_check_bounds_rejects_negative_offset(self):
        ws = WeightedShape(((3, -1),), offset=1)
        with self.assertRaises(IndexOutOfRangeError):
            Traverser(ws, U8).check_bounds(bytes(3))

    def test_read_checks_bounds(self):
        t = Traverser(transpose(build((2, 3))), U8)
        with self.assertRaises(IndexOutOfRangeError):
            t.read(bytes(5))

    def test_identity_read_rejects_short_buffer(self):
        t = Traverser(build((4,)), U8)
        with self.assertRaises(IndexOutOfRangeError):
            t.read(bytes(2))

    def test_read_rejects_negative_offset(self):
        t = Traverser(WeightedShape(((3, -1),), offset=1), U8)
        with self.assertRaises(IndexOutOfRangeError):
            t.read(bytes(3))

    def test_reduce_checks_bounds(self):
        t = Traverser(aggregate(build((2, 2)), (1,)), U8)
        with self.assertRaises(IndexOutOfRangeError):
            t.reduce(bytes(3), 0, lambda v, acc: acc + v)

    def test_decoded_values_round_trip(self):
        buf = encode_many([0.5, 1.5], F32)
        self.assertEqual(decode_all(Traverser(reverse(build((2,)), None), F32).read(buf), F32), [1.5, 0.5])


if __name__ == "__main__":
    unittest.main()
