"""
Scalar encode/decode dispatch table.

Every supported ``(kind, bits)`` pair maps to exactly one `ScalarCodec`
holding a ``struct`` format and the encode/decode callables for that type.
All layouts are little-endian.

Design notes
------------
- Integers wrap modulo ``2**bits`` on encode (two's complement for signed
  types). Floats assigned to integer types are truncated toward zero.
- IEEE floats whose magnitude exceeds the target format encode as an
  infinity of the same sign.
- ``bf16`` is the upper half of the float32 encoding: the value is rounded
  to the nearest float32 and the low 16 mantissa bits are dropped.
"""

from __future__ import annotations

import math
import struct
from typing import Callable, Dict, Iterator, List, NamedTuple, Tuple, Union

from ...domain._errors import UnsupportedTypeError
from ...domain._types import ScalarKind, ScalarType

Number = Union[int, float]


class ScalarCodec(NamedTuple):
    """
    Codec entry for a single scalar type.

    Fields
    ------
    dtype : ScalarType
        Type handled by this entry.
    fmt : str
        ``struct`` format character of the stored representation.
    encode : Callable[[Number], bytes]
        Produces exactly ``dtype.byte_width`` bytes.
    decode : Callable[[bytes], Number]
        Inverse of ``encode`` (lossy for bf16).
    """

    dtype: ScalarType
    fmt: str
    encode: Callable[[Number], bytes]
    decode: Callable[[bytes], Number]


def _int_codec(dtype: ScalarType, fmt: str) -> ScalarCodec:
    packer = struct.Struct("<" + fmt)
    modulus = 1 << dtype.bits
    half = modulus >> 1
    signed = dtype.kind is ScalarKind.SIGNED

    def encode(value: Number) -> bytes:
        v = int(value)
        if signed:
            v = ((v + half) % modulus) - half
        else:
            v %= modulus
        return packer.pack(v)

    def decode(data: bytes) -> int:
        return packer.unpack(data)[0]

    return ScalarCodec(dtype, fmt, encode, decode)


def _pack_float(packer: struct.Struct, value: Number) -> bytes:
    f = float(value)
    try:
        return packer.pack(f)
    except OverflowError:
        return packer.pack(math.copysign(math.inf, f))


def _float_codec(dtype: ScalarType, fmt: str) -> ScalarCodec:
    packer = struct.Struct("<" + fmt)

    def encode(value: Number) -> bytes:
        return _pack_float(packer, value)

    def decode(data: bytes) -> float:
        return packer.unpack(data)[0]

    return ScalarCodec(dtype, fmt, encode, decode)


_F32 = struct.Struct("<f")


def _bf16_codec(dtype: ScalarType) -> ScalarCodec:
    def encode(value: Number) -> bytes:
        return _pack_float(_F32, value)[2:]

    def decode(data: bytes) -> float:
        return _F32.unpack(b"\x00\x00" + bytes(data))[0]

    return ScalarCodec(dtype, "H", encode, decode)


def _build_table() -> Dict[Tuple[ScalarKind, int], ScalarCodec]:
    table: Dict[Tuple[ScalarKind, int], ScalarCodec] = {}

    for bits, fmt in ((8, "B"), (16, "H"), (32, "I"), (64, "Q")):
        dtype = ScalarType(ScalarKind.UNSIGNED, bits)
        table[(dtype.kind, bits)] = _int_codec(dtype, fmt)

    for bits, fmt in ((8, "b"), (16, "h"), (32, "i"), (64, "q")):
        dtype = ScalarType(ScalarKind.SIGNED, bits)
        table[(dtype.kind, bits)] = _int_codec(dtype, fmt)

    for bits, fmt in ((16, "e"), (32, "f"), (64, "d")):
        dtype = ScalarType(ScalarKind.FLOAT, bits)
        table[(dtype.kind, bits)] = _float_codec(dtype, fmt)

    bf16 = ScalarType(ScalarKind.BFLOAT, 16)
    table[(bf16.kind, 16)] = _bf16_codec(bf16)

    return table


_CODECS = _build_table()


def codec_for(dtype: ScalarType) -> ScalarCodec:
    """
    Resolve the codec entry for ``dtype``.

    Raises
    ------
    UnsupportedTypeError
        If ``dtype`` is not in the dispatch table.
    """
    try:
        return _CODECS[(dtype.kind, dtype.bits)]
    except (KeyError, AttributeError):
        raise UnsupportedTypeError(dtype) from None


def supported_types() -> Tuple[ScalarType, ...]:
    return tuple(entry.dtype for entry in _CODECS.values())


def byte_width(dtype: ScalarType) -> int:
    """Number of bytes one element of ``dtype`` occupies."""
    return codec_for(dtype).dtype.byte_width


def encode(value: Number, dtype: ScalarType) -> bytes:
    """Encode a single number as ``byte_width(dtype)`` bytes."""
    return codec_for(dtype).encode(value)


def decode(data: bytes, dtype: ScalarType) -> Number:
    """Decode a single element; ``data`` must be exactly one element wide."""
    return codec_for(dtype).decode(data)


def encode_many(values: Iterator[Number] | List[Number], dtype: ScalarType) -> bytes:
    """Encode a sequence of numbers into one contiguous buffer."""
    enc = codec_for(dtype).encode
    return b"".join(enc(v) for v in values)


def decode_all(buffer: bytes, dtype: ScalarType) -> List[Number]:
    """
    Decode every element of ``buffer`` in storage order.

    Uses ``struct.iter_unpack`` so a whole buffer is decoded in one pass.
    """
    entry = codec_for(dtype)
    if dtype.kind is ScalarKind.BFLOAT:
        return [
            _F32.unpack(struct.pack("<I", h << 16))[0]
            for (h,) in struct.iter_unpack("<H", buffer)
        ]
    return [v for (v,) in struct.iter_unpack("<" + entry.fmt, buffer)]
