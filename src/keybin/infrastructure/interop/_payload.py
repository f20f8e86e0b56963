from __future__ import annotations

import base64
from typing import Any, Dict

from ...domain._array import ArrayData
from ...domain._types import to_scalar_type
from ..codec._bits import check_buffer


def bytes_to_b64_str(b: bytes) -> str:
    """
    Encode raw bytes into a base64 ASCII string (JSON-safe).
    """
    return base64.b64encode(b).decode("ascii")


def b64_str_to_bytes(s: str) -> bytes:
    return base64.b64decode(s.encode("ascii"))


def array_to_payload(data: ArrayData) -> Dict[str, Any]:
    """
    Serialize an array into a JSON-safe payload.

    Returns
    -------
    dict
        {
          "b64": "<base64>",
          "dtype": "<scalar type str>",
          "shape": [...]
        }
    """
    check_buffer(data.shape, data.dtype, data.buffer)
    return {
        "b64": bytes_to_b64_str(bytes(data.buffer)),
        "dtype": str(data.dtype),
        "shape": list(data.shape),
    }


def payload_to_array(payload: Dict[str, Any]) -> ArrayData:
    """
    Deserialize a payload produced by `array_to_payload`.

    Raises
    ------
    ShapeMismatchError
        If the decoded byte count does not match shape and dtype.
    """
    buffer = b64_str_to_bytes(str(payload["b64"]))
    dtype = to_scalar_type(str(payload["dtype"]))
    shape = tuple(int(x) for x in payload["shape"])
    check_buffer(shape, dtype, buffer)
    return ArrayData(shape, dtype, buffer)
