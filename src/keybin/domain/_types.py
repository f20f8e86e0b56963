"""
Scalar type descriptors.

A scalar type is identified by a numeric *kind* and a bit width. The pair
determines the fixed number of bytes each element occupies in a flat
buffer. Descriptors are plain immutable values; whether the codec actually
knows how to encode a given pair is decided by the codec's dispatch table,
not here.

Supported kinds
---------------
- ``u``  : unsigned integer
- ``s``  : signed (two's complement) integer
- ``f``  : IEEE 754 binary float (16, 32 or 64 bits)
- ``bf`` : truncated-mantissa 16-bit float (upper half of a float32)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from ._errors import UnsupportedTypeError


class ScalarKind(Enum):
    """
    Enumeration of numeric kinds understood by the engine.
    """

    UNSIGNED = "u"
    SIGNED = "s"
    FLOAT = "f"
    BFLOAT = "bf"


@dataclass(frozen=True)
class ScalarType:
    """
    Immutable scalar type descriptor.

    Parameters
    ----------
    kind : ScalarKind
        Numeric kind.
    bits : int
        Bit width. Must be a positive multiple of 8.
    """

    kind: ScalarKind
    bits: int

    def __post_init__(self) -> None:
        if not isinstance(self.kind, ScalarKind):
            raise UnsupportedTypeError(self.kind, "(kind must be a ScalarKind)")
        if self.bits <= 0 or self.bits % 8 != 0:
            raise UnsupportedTypeError((self.kind.value, self.bits))

    @property
    def byte_width(self) -> int:
        """Number of bytes a single element occupies."""
        return self.bits // 8

    def is_integer(self) -> bool:
        return self.kind in (ScalarKind.UNSIGNED, ScalarKind.SIGNED)

    def is_float(self) -> bool:
        return self.kind in (ScalarKind.FLOAT, ScalarKind.BFLOAT)

    def __str__(self) -> str:
        return f"{self.kind.value}{self.bits}"

    def __repr__(self) -> str:
        return f"ScalarType({self.kind.value!r}, {self.bits})"


U8 = ScalarType(ScalarKind.UNSIGNED, 8)
U16 = ScalarType(ScalarKind.UNSIGNED, 16)
U32 = ScalarType(ScalarKind.UNSIGNED, 32)
U64 = ScalarType(ScalarKind.UNSIGNED, 64)
S8 = ScalarType(ScalarKind.SIGNED, 8)
S16 = ScalarType(ScalarKind.SIGNED, 16)
S32 = ScalarType(ScalarKind.SIGNED, 32)
S64 = ScalarType(ScalarKind.SIGNED, 64)
BF16 = ScalarType(ScalarKind.BFLOAT, 16)
F16 = ScalarType(ScalarKind.FLOAT, 16)
F32 = ScalarType(ScalarKind.FLOAT, 32)
F64 = ScalarType(ScalarKind.FLOAT, 64)

TypeLike = Union[ScalarType, str, Tuple[str, int]]


def to_scalar_type(dtype: TypeLike) -> ScalarType:
    """
    Normalize a type-like value into a `ScalarType`.

    Accepts an existing descriptor, a ``(kind, bits)`` tuple such as
    ``("u", 8)``, or a compact string such as ``"f32"`` / ``"bf16"``.

    Raises
    ------
    UnsupportedTypeError
        If the value cannot be interpreted.
    """
    if isinstance(dtype, ScalarType):
        return dtype

    if isinstance(dtype, tuple) and len(dtype) == 2:
        kind, bits = dtype
    elif isinstance(dtype, str):
        prefix = dtype.rstrip("0123456789")
        digits = dtype[len(prefix) :]
        if not digits:
            raise UnsupportedTypeError(dtype)
        kind, bits = prefix, int(digits)
    else:
        raise UnsupportedTypeError(dtype)

    try:
        return ScalarType(ScalarKind(kind), int(bits))
    except ValueError as e:
        raise UnsupportedTypeError(dtype) from e


def merge_types(a: ScalarType, b: ScalarType) -> ScalarType:
    """
    Return the type two operands are promoted to in a binary operation.

    Floats win over integers; within the same family the wider width wins.
    Mixing signed and unsigned integers yields a signed integer wide enough
    for both operands where possible (capped at 64 bits).
    """
    if a == b:
        return a

    if a.is_float() or b.is_float():
        if a.is_float() and b.is_float():
            if a.bits != b.bits:
                return a if a.bits > b.bits else b
            # bf16 and f16 have no common 16-bit supertype
            return F32
        return a if a.is_float() else b

    if a.kind == b.kind:
        return a if a.bits >= b.bits else b

    unsigned, signed = (a, b) if a.kind is ScalarKind.UNSIGNED else (b, a)
    bits = signed.bits if signed.bits > unsigned.bits else min(unsigned.bits * 2, 64)
    return ScalarType(ScalarKind.SIGNED, bits)


def float_type_for(dtype: ScalarType) -> ScalarType:
    """Float type used when an integer operand feeds a float-valued op."""
    return dtype if dtype.is_float() else F32


def type_min(dtype: ScalarType) -> float | int:
    """Smallest value representable by ``dtype`` (``-inf`` for floats)."""
    if dtype.kind is ScalarKind.UNSIGNED:
        return 0
    if dtype.kind is ScalarKind.SIGNED:
        return -(1 << (dtype.bits - 1))
    return float("-inf")


def type_max(dtype: ScalarType) -> float | int:
    """Largest value representable by ``dtype`` (``inf`` for floats)."""
    if dtype.kind is ScalarKind.UNSIGNED:
        return (1 << dtype.bits) - 1
    if dtype.kind is ScalarKind.SIGNED:
        return (1 << (dtype.bits - 1)) - 1
    return float("inf")
