# tests/domain/test_scalar_types.py
"""
Unit tests for scalar type descriptors and promotion rules.

Covers descriptor validation, parsing through `to_scalar_type`,
`merge_types` promotion and the per-type value limits.
"""

from unittest import TestCase
import unittest

from keybin.domain import (
    BF16,
    F16,
    F32,
    F64,
    S8,
    S16,
    S32,
    S64,
    U8,
    U16,
    U32,
    U64,
    ScalarKind,
    ScalarType,
    UnsupportedTypeError,
    float_type_for,
    merge_types,
    to_scalar_type,
    type_max,
    type_min,
)


class TestScalarTypeDescriptor(TestCase):
    def test_byte_widths_match_table(self):
        expected = {
            U8: 1,
            S8: 1,
            S16: 2,
            S32: 4,
            S64: 8,
            BF16: 2,
            F16: 2,
            F32: 4,
            F64: 8,
            U16: 2,
            U32: 4,
            U64: 8,
        }
        for dtype, width in expected.items():
            with self.subTest(dtype=str(dtype)):
                self.assertEqual(dtype.byte_width, width)

    def test_str_and_repr(self):
        self.assertEqual(str(F32), "f32")
        self.assertEqual(str(BF16), "bf16")
        self.assertEqual(repr(U8), "ScalarType('u', 8)")

    def test_integer_and_float_predicates(self):
        self.assertTrue(S16.is_integer())
        self.assertFalse(S16.is_float())
        self.assertTrue(BF16.is_float())
        self.assertFalse(BF16.is_integer())

    def test_invalid_bits_rejected(self):
        with self.assertRaises(UnsupportedTypeError):
            ScalarType(ScalarKind.UNSIGNED, 12)
        with self.assertRaises(UnsupportedTypeError):
            ScalarType(ScalarKind.FLOAT, 0)

    def test_kind_must_be_enum(self):
        with self.assertRaises(UnsupportedTypeError):
            ScalarType("u", 8)

    def test_descriptors_are_hashable_values(self):
        self.assertEqual(ScalarType(ScalarKind.FLOAT, 32), F32)
        self.assertEqual(len({F32, ScalarType(ScalarKind.FLOAT, 32)}), 1)


class TestToScalarType(TestCase):
    def test_accepts_strings(self):
        self.assertEqual(to_scalar_type("f32"), F32)
        self.assertEqual(to_scalar_type("bf16"), BF16)
        self.assertEqual(to_scalar_type("s64"), S64)

    def test_accepts_tuples(self):
        self.assertEqual(to_scalar_type(("u", 8)), U8)
        self.assertEqual(to_scalar_type(("f", 16)), F16)

    def test_passes_descriptor_through(self):
        self.assertIs(to_scalar_type(U32), U32)

    def test_rejects_garbage(self):
        for bad in ("float", "x8", "u", 3.5, ("q", 8), ("u", 7)):
            with self.subTest(bad=bad):
                with self.assertRaises(UnsupportedTypeError):
                    to_scalar_type(bad)


class TestTypePromotion(TestCase):
    def test_same_type_is_kept(self):
        self.assertEqual(merge_types(S32, S32), S32)

    def test_float_wins_over_integer(self):
        self.assertEqual(merge_types(S64, F16), F16)
        self.assertEqual(merge_types(F32, U8), F32)

    def test_wider_float_wins(self):
        self.assertEqual(merge_types(F32, F64), F64)
        self.assertEqual(merge_types(BF16, F32), F32)

    def test_half_precision_pair_goes_to_f32(self):
        self.assertEqual(merge_types(F16, BF16), F32)

    def test_wider_integer_wins(self):
        self.assertEqual(merge_types(U8, U32), U32)
        self.assertEqual(merge_types(S16, S8), S16)

    def test_mixed_signedness(self):
        self.assertEqual(merge_types(U8, S8), S16)
        self.assertEqual(merge_types(U8, S32), S32)
        self.assertEqual(merge_types(U64, S8), S64)

    def test_float_type_for(self):
        self.assertEqual(float_type_for(S32), F32)
        self.assertEqual(float_type_for(F64), F64)


class TestTypeLimits(TestCase):
    def test_integer_limits(self):
        self.assertEqual(type_min(U8), 0)
        self.assertEqual(type_max(U8), 255)
        self.assertEqual(type_min(S16), -32768)
        self.assertEqual(type_max(S16), 32767)
        self.assertEqual(type_max(U64), 2**64 - 1)

    def test_float_limits_are_infinite(self):
        self.assertEqual(type_min(F32), float("-inf"))
        self.assertEqual(type_max(BF16), float("inf"))


if __name__ == "__main__":
    unittest.main()
