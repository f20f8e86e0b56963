"""
Plain value carried across the engine boundary.
"""

from __future__ import annotations

from typing import NamedTuple

from ._shape import Shape, element_count
from ._types import ScalarType


class ArrayData(NamedTuple):
    """
    A materialized array: logical shape, element type and flat buffer.

    Every engine operation returns a new `ArrayData`; the ``buffer`` is an
    immutable row-major ``bytes`` object owned by the result.
    """

    shape: Shape
    dtype: ScalarType
    buffer: bytes

    @property
    def size(self) -> int:
        return element_count(self.shape)

    @property
    def nbytes(self) -> int:
        return len(self.buffer)
