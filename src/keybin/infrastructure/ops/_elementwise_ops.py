"""
Elementwise operations resolved through static registration tables.

Binary operations are registered in `binary_ops`, unary operations in
`unary_ops`. Each entry carries a ``result`` rule that decides the output
element type from the operand types:

- ``"merge"`` : the promoted operand type (see `merge_types`)
- ``"float"`` : the promoted type, or float32 when it is an integer type
- ``"u8"``    : unsigned 8-bit, used for comparisons and logical ops

Entries registered with ``typed=True`` also receive the output type as
``out_type`` so they can bound their work to its width.

Binary operands are broadcast to a common shape through zero-step views,
so no intermediate broadcast buffer is allocated.
"""

from __future__ import annotations

import math
from functools import partial
from typing import Any, Optional, Sequence

from ...domain._array import ArrayData
from ...domain._errors import UnsupportedTypeError
from ...domain._shape import broadcast_shapes, element_count
from ...domain._types import U8, ScalarType, float_type_for, merge_types
from ...domain.utils._registry import OpRegistry
from ..codec._bits import check_buffer
from ..codec._scalar import codec_for, decode_all
from ..view._view import View
from ._parallel import materialize

binary_ops = OpRegistry("binary")
unary_ops = OpRegistry("unary")


# ----------------------------------------------------------------------
# Binary
# ----------------------------------------------------------------------
binary_ops.add("add", lambda a, b: a + b, result="merge")
binary_ops.add("subtract", lambda a, b: a - b, result="merge")
binary_ops.add("multiply", lambda a, b: a * b, result="merge")
binary_ops.add("min", lambda a, b: a if a <= b or a != a else b, result="merge")
binary_ops.add("max", lambda a, b: a if a >= b or a != a else b, result="merge")
binary_ops.add("atan2", math.atan2, result="float")

binary_ops.add("equal", lambda a, b: int(a == b), result="u8")
binary_ops.add("not_equal", lambda a, b: int(a != b), result="u8")
binary_ops.add("greater", lambda a, b: int(a > b), result="u8")
binary_ops.add("less", lambda a, b: int(a < b), result="u8")
binary_ops.add("greater_equal", lambda a, b: int(a >= b), result="u8")
binary_ops.add("less_equal", lambda a, b: int(a <= b), result="u8")

binary_ops.add("logical_and", lambda a, b: int(bool(a) and bool(b)), result="u8")
binary_ops.add("logical_or", lambda a, b: int(bool(a) or bool(b)), result="u8")
binary_ops.add("logical_xor", lambda a, b: int(bool(a) != bool(b)), result="u8")

binary_ops.add("bitwise_and", lambda a, b: int(a) & int(b), result="merge")
binary_ops.add("bitwise_or", lambda a, b: int(a) | int(b), result="merge")
binary_ops.add("bitwise_xor", lambda a, b: int(a) ^ int(b), result="merge")


@binary_ops.register("left_shift", result="merge", typed=True)
def _left_shift(a, b, out_type: Optional[ScalarType] = None):
    # counts at or past the output width shift every bit out
    if out_type is not None and int(b) >= out_type.bits:
        return 0
    return int(a) << int(b)


binary_ops.add("right_shift", lambda a, b: int(a) >> int(b), result="merge")


@binary_ops.register("divide", result="float")
def _divide(a, b):
    if b == 0:
        if a == 0 or a != a:
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


@binary_ops.register("quotient", result="merge")
def _quotient(a, b):
    if isinstance(a, float) or isinstance(b, float):
        q = _divide(a, b)
        return float(math.trunc(q)) if math.isfinite(q) else q
    return _trunc_div(a, b)


@binary_ops.register("remainder", result="merge")
def _remainder(a, b):
    if isinstance(a, float) or isinstance(b, float):
        return math.fmod(a, b) if b != 0 and math.isfinite(a) else math.nan
    return a - b * _trunc_div(a, b)


@binary_ops.register("power", result="merge", typed=True)
def _power(a, b, out_type: Optional[ScalarType] = None):
    if isinstance(a, int) and isinstance(b, int) and b >= 0:
        if out_type is None:
            return a**b
        if out_type.is_integer():
            # wraps modulo 2**bits like the integer encoder
            return pow(a, b, 1 << out_type.bits)
    try:
        return math.pow(a, b)
    except OverflowError:
        return math.inf
    except ValueError:
        # negative base with fractional exponent
        return math.nan


# ----------------------------------------------------------------------
# Unary
# ----------------------------------------------------------------------
def _keep_non_finite(fn):
    def wrapped(a):
        if isinstance(a, float) and not math.isfinite(a):
            return a
        return fn(a)

    wrapped.__name__ = getattr(fn, "__name__", "wrapped")
    return wrapped


@unary_ops.register("negate", result="merge")
def _negate(a):
    return -a


unary_ops.add("abs", abs, result="merge")
unary_ops.add("bitwise_not", lambda a: ~int(a), result="merge")


@unary_ops.register("sign", result="merge")
def _sign(a):
    if a != a:
        return a
    return (a > 0) - (a < 0)


@unary_ops.register("floor", result="merge")
@_keep_non_finite
def _floor(a):
    return math.floor(a)


@unary_ops.register("ceil", result="merge")
@_keep_non_finite
def _ceil(a):
    return math.ceil(a)


@unary_ops.register("round", result="merge")
@_keep_non_finite
def _round(a):
    # half away from zero
    return math.copysign(math.floor(abs(a) + 0.5), a) if isinstance(a, float) else a


@unary_ops.register("exp", result="float")
def _exp(a):
    try:
        return math.exp(a)
    except OverflowError:
        return math.inf


@unary_ops.register("log", result="float")
def _log(a):
    if a == 0:
        return -math.inf
    if a < 0 or a != a:
        return math.nan
    return math.log(a)


@unary_ops.register("sqrt", result="float")
def _sqrt(a):
    if a < 0 or a != a:
        return math.nan
    return math.sqrt(a)


@unary_ops.register("sigmoid", result="float")
def _sigmoid(a):
    if a >= 0:
        return 1.0 / (1.0 + math.exp(-a))
    z = math.exp(a)
    return z / (1.0 + z)


def _nan_on_domain_error(fn):
    def wrapped(a):
        try:
            return fn(a)
        except ValueError:
            return math.nan

    wrapped.__name__ = fn.__name__
    return wrapped


unary_ops.add("sin", _nan_on_domain_error(math.sin), result="float")
unary_ops.add("cos", _nan_on_domain_error(math.cos), result="float")
unary_ops.add("tan", _nan_on_domain_error(math.tan), result="float")
unary_ops.add("tanh", math.tanh, result="float")


# ----------------------------------------------------------------------
# Execution
# ----------------------------------------------------------------------
def result_type(rule: str, *types: ScalarType) -> ScalarType:
    """Output type of an op with result ``rule`` applied to ``types``."""
    merged = types[0]
    for t in types[1:]:
        merged = merge_types(merged, t)
    if rule == "merge":
        return merged
    if rule == "float":
        return float_type_for(merged)
    if rule == "u8":
        return U8
    raise UnsupportedTypeError(merged, f"(unknown result rule {rule!r})")


def binary(
    name: str,
    shape1: Sequence[int],
    type1: ScalarType,
    buffer1: bytes,
    shape2: Sequence[int],
    type2: ScalarType,
    buffer2: bytes,
    out_type: Optional[ScalarType] = None,
) -> ArrayData:
    """
    Apply the binary op registered under ``name`` elementwise.

    Operands are broadcast to their common shape with right-aligned rules.
    """
    entry = binary_ops.get(name)
    check_buffer(shape1, type1, buffer1)
    check_buffer(shape2, type2, buffer2)

    out_shape = broadcast_shapes(shape1, shape2)
    out_type = out_type or result_type(entry.meta["result"], type1, type2)

    left = View.build(shape1).broadcast(out_shape).build_traverser()
    right = View.build(shape2).broadcast(out_shape).build_traverser()
    values1 = decode_all(buffer1, type1)
    values2 = decode_all(buffer2, type2)
    fn = entry.fn
    if entry.meta.get("typed"):
        fn = partial(fn, out_type=out_type)
    enc = codec_for(out_type).encode

    def chunk(start: int, stop: int) -> bytes:
        return b"".join(
            enc(fn(values1[i], values2[j]))
            for i, j in zip(left.indices(start, stop), right.indices(start, stop))
        )

    return ArrayData(out_shape, out_type, materialize(element_count(out_shape), chunk))


def unary(
    name: str,
    shape: Sequence[int],
    dtype: ScalarType,
    buffer: bytes,
    out_type: Optional[ScalarType] = None,
) -> ArrayData:
    """Apply the unary op registered under ``name`` to every element."""
    entry = unary_ops.get(name)
    count = check_buffer(shape, dtype, buffer)
    out_type = out_type or result_type(entry.meta["result"], dtype)

    values = decode_all(buffer, dtype)
    fn = entry.fn
    enc = codec_for(out_type).encode

    def chunk(start: int, stop: int) -> bytes:
        return b"".join(enc(fn(v)) for v in values[start:stop])

    return ArrayData(tuple(shape), out_type, materialize(count, chunk))


def map_values(
    shape: Sequence[int],
    dtype: ScalarType,
    buffer: bytes,
    fn: Any,
    out_type: Optional[ScalarType] = None,
) -> ArrayData:
    """Apply an arbitrary ``fn(value) -> value`` to every element."""
    count = check_buffer(shape, dtype, buffer)
    out_type = dtype if out_type is None else out_type
    values = decode_all(buffer, dtype)
    enc = codec_for(out_type).encode

    def chunk(start: int, stop: int) -> bytes:
        return b"".join(enc(fn(v)) for v in values[start:stop])

    return ArrayData(tuple(shape), out_type, materialize(count, chunk))


def as_type(
    shape: Sequence[int], dtype: ScalarType, buffer: bytes, out_type: ScalarType
) -> ArrayData:
    """
    Convert every element to ``out_type``.

    Floats converted to integers truncate toward zero and then wrap modulo
    the target width. NaN and infinities cannot be converted to integers
    and raise ``ValueError`` / ``OverflowError``.
    """
    if out_type == dtype:
        check_buffer(shape, dtype, buffer)
        return ArrayData(tuple(shape), dtype, bytes(buffer))
    return map_values(shape, dtype, buffer, lambda v: v, out_type)
