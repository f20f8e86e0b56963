"""
Scalar codec and indexed buffer access.

Public API
----------
- `encode`, `decode`, `byte_width`, `codec_for`, `supported_types`
- `encode_many`, `decode_all`
- `read_at`, `read_at_index`, `read_number`, `check_buffer`
- `weight_of_axis`, `axis_component`
- `zip_reduce`
"""

from ._scalar import (
    ScalarCodec,
    byte_width,
    codec_for,
    decode,
    decode_all,
    encode,
    encode_many,
    supported_types,
)
from ._bits import (
    axis_component,
    check_buffer,
    read_at,
    read_at_index,
    read_number,
    weight_of_axis,
    zip_reduce,
)

__all__ = [
    "ScalarCodec",
    "byte_width",
    "codec_for",
    "decode",
    "decode_all",
    "encode",
    "encode_many",
    "supported_types",
    "axis_component",
    "check_buffer",
    "read_at",
    "read_at_index",
    "read_number",
    "weight_of_axis",
    "zip_reduce",
]
