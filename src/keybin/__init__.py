"""
keybin: shape-aware operations over flat little-endian byte buffers.
"""

from .domain import (
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
    ArrayData,
    IndexOutOfRangeError,
    ScalarType,
    ShapeMismatchError,
    UnknownOperationError,
    UnsupportedTypeError,
    to_scalar_type,
)
from .infrastructure import EngineConfig, get_config, reload_config

__version__ = "0.1.0"

__all__ = [
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
    "ArrayData",
    "IndexOutOfRangeError",
    "ScalarType",
    "ShapeMismatchError",
    "UnknownOperationError",
    "UnsupportedTypeError",
    "to_scalar_type",
    "EngineConfig",
    "get_config",
    "reload_config",
]
