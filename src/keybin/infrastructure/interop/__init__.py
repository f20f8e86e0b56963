"""
Conversions between flat buffers and outside representations:
NumPy arrays and JSON-safe base64 payloads.
"""

from ._numpy import from_numpy, numpy_dtype, scalar_type_of, to_numpy
from ._payload import (
    array_to_payload,
    b64_str_to_bytes,
    bytes_to_b64_str,
    payload_to_array,
)

__all__ = [
    "from_numpy",
    "numpy_dtype",
    "scalar_type_of",
    "to_numpy",
    "array_to_payload",
    "b64_str_to_bytes",
    "bytes_to_b64_str",
    "payload_to_array",
]
