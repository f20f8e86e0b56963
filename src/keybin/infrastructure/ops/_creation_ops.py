"""
Buffer factories: iota, eye and full.
"""

from __future__ import annotations

from typing import Optional, Sequence

from ...domain._array import ArrayData
from ...domain._errors import ShapeMismatchError
from ...domain._shape import element_count, normalize_axes
from ...domain._types import ScalarType
from ..codec._scalar import encode, encode_many
from ._shape_ops import broadcast


def full(shape: Sequence[int], dtype: ScalarType, value) -> ArrayData:
    """Array of ``shape`` with every element equal to ``value``."""
    shape = tuple(shape)
    return ArrayData(shape, dtype, encode(value, dtype) * element_count(shape))


def iota(shape: Sequence[int], dtype: ScalarType, axis: Optional[int] = None) -> ArrayData:
    """
    Counting array.

    With ``axis=None`` elements count ``0, 1, 2, ...`` in row-major order.
    Otherwise every element holds its index along ``axis``.
    """
    shape = tuple(shape)
    if axis is None:
        return ArrayData(shape, dtype, encode_many(range(element_count(shape)), dtype))

    (axis,) = normalize_axes((axis,), len(shape))
    line = encode_many(range(shape[axis]), dtype)
    return broadcast((shape[axis],), dtype, line, shape, axes=(axis,))


def eye(shape: Sequence[int], dtype: ScalarType) -> ArrayData:
    """
    Identity matrices: ones where the last two indices are equal.

    Leading axes, if any, act as a batch of identical matrices.
    """
    shape = tuple(shape)
    if len(shape) < 2:
        raise ShapeMismatchError(f"eye needs at least two axes, got {shape}")
    rows, cols = shape[-2], shape[-1]
    one, zero = encode(1, dtype), encode(0, dtype)
    matrix = b"".join(
        one if r == c else zero for r in range(rows) for c in range(cols)
    )
    return ArrayData(shape, dtype, matrix * element_count(shape[:-2]))
