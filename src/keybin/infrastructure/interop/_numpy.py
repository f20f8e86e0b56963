from __future__ import annotations

from typing import Dict, Tuple

import numpy as np

from ...domain._array import ArrayData
from ...domain._errors import UnsupportedTypeError
from ...domain._types import (
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
    ScalarType,
)
from ..codec._bits import check_buffer

_TO_NUMPY: Dict[ScalarType, np.dtype] = {
    U8: np.dtype("<u1"),
    U16: np.dtype("<u2"),
    U32: np.dtype("<u4"),
    U64: np.dtype("<u8"),
    S8: np.dtype("<i1"),
    S16: np.dtype("<i2"),
    S32: np.dtype("<i4"),
    S64: np.dtype("<i8"),
    F16: np.dtype("<f2"),
    F32: np.dtype("<f4"),
    F64: np.dtype("<f8"),
}

_FROM_NUMPY: Dict[Tuple[str, int], ScalarType] = {
    (dt.kind, dt.itemsize): st for st, dt in _TO_NUMPY.items()
}


def numpy_dtype(dtype: ScalarType) -> np.dtype:
    """
    Little-endian NumPy dtype equivalent to ``dtype``.

    Raises
    ------
    UnsupportedTypeError
        For bf16, which NumPy has no native dtype for.
    """
    try:
        return _TO_NUMPY[dtype]
    except KeyError:
        hint = "(NumPy has no bfloat16 dtype)" if dtype == BF16 else ""
        raise UnsupportedTypeError(dtype, hint) from None


def scalar_type_of(dt) -> ScalarType:
    """
    Scalar type matching a NumPy dtype. Byte order is ignored and booleans
    map to u8.
    """
    dt = np.dtype(dt)
    if dt.kind == "b":
        return U8
    try:
        return _FROM_NUMPY[(dt.kind, dt.itemsize)]
    except KeyError:
        raise UnsupportedTypeError(str(dt)) from None


def from_numpy(arr) -> ArrayData:
    """
    Copy a NumPy array into a little-endian flat buffer.
    """
    a = np.asarray(arr)
    dtype = scalar_type_of(a.dtype)
    a = np.ascontiguousarray(a, dtype=_TO_NUMPY[dtype])
    return ArrayData(tuple(int(s) for s in a.shape), dtype, a.tobytes(order="C"))


def to_numpy(shape, dtype: ScalarType, buffer: bytes) -> np.ndarray:
    """
    Decode a flat buffer into an owning, C-contiguous NumPy array.
    """
    check_buffer(shape, dtype, buffer)
    arr = np.frombuffer(bytes(buffer), dtype=numpy_dtype(dtype))
    arr = arr.reshape(tuple(shape))
    return np.array(arr, copy=True, order="C")
