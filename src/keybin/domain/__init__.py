"""
Domain layer: scalar types, shape arithmetic and engine errors.

Nothing in this package imports third-party numeric libraries.
"""

from ._array import ArrayData
from ._errors import (
    IndexOutOfRangeError,
    ShapeMismatchError,
    UnknownOperationError,
    UnsupportedTypeError,
)
from ._shape import (
    Shape,
    Weights,
    broadcast_shapes,
    element_count,
    flat_index,
    normalize_axes,
    row_major_steps,
    weights,
)
from ._types import (
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
    TypeLike,
    float_type_for,
    merge_types,
    to_scalar_type,
    type_max,
    type_min,
)

__all__ = [
    "ArrayData",
    "IndexOutOfRangeError",
    "ShapeMismatchError",
    "UnknownOperationError",
    "UnsupportedTypeError",
    "Shape",
    "Weights",
    "broadcast_shapes",
    "element_count",
    "flat_index",
    "normalize_axes",
    "row_major_steps",
    "weights",
    "BF16",
    "F16",
    "F32",
    "F64",
    "S8",
    "S16",
    "S32",
    "S64",
    "U8",
    "U16",
    "U32",
    "U64",
    "ScalarKind",
    "ScalarType",
    "TypeLike",
    "float_type_for",
    "merge_types",
    "to_scalar_type",
    "type_max",
    "type_min",
]
