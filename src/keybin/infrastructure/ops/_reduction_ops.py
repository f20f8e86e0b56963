"""
Axis reductions over flat buffers.

`reduce` is the generic entry point: the reduced axes are folded into the
view as inner traversal loops, and each output element is the fold of its
group with ``fn(value, acc)`` starting from ``init``.

Named reductions (``sum``, ``product``, ``max``, ``min``, ``mean``, ``all``,
``any``) are registered in `reductions`, a static table mapping each name to
its fold function and metadata:

- ``init``     : callable ``(dtype) -> initial accumulator``
- ``result``   : ``"same"`` | ``"float"`` | ``"u8"`` output type rule
- ``finalize`` : optional ``(acc, group_size) -> value``
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from ...domain._array import ArrayData
from ...domain._errors import UnsupportedTypeError
from ...domain._shape import normalize_axes
from ...domain._types import U8, ScalarType, float_type_for, type_max, type_min
from ...domain.utils._registry import OpRegistry
from ..codec._bits import check_buffer
from ..codec._scalar import codec_for, decode_all
from ..view._view import View
from ._parallel import materialize

FoldFn = Callable[[Any, Any], Any]
Finalize = Callable[[Any, int], Any]

reductions = OpRegistry("reduction")


@reductions.register("sum", init=lambda dtype: 0, result="same")
def _sum(value, acc):
    return acc + value


@reductions.register("product", init=lambda dtype: 1, result="same")
def _product(value, acc):
    return acc * value


@reductions.register("max", init=type_min, result="same")
def _max(value, acc):
    # NaN propagates
    if value != value or value > acc:
        return value
    return acc


@reductions.register("min", init=type_max, result="same")
def _min(value, acc):
    if value != value or value < acc:
        return value
    return acc


@reductions.register(
    "mean",
    init=lambda dtype: 0,
    result="float",
    finalize=lambda acc, n: acc / n if n else float("nan"),
)
def _mean(value, acc):
    return acc + value


@reductions.register("all", init=lambda dtype: 1, result="u8")
def _all(value, acc):
    return 1 if acc and value else 0


@reductions.register("any", init=lambda dtype: 0, result="u8")
def _any(value, acc):
    return 1 if acc or value else 0


def result_type(rule: str, dtype: ScalarType) -> ScalarType:
    if rule == "same":
        return dtype
    if rule == "float":
        return float_type_for(dtype)
    if rule == "u8":
        return U8
    raise UnsupportedTypeError(dtype, f"(unknown result rule {rule!r})")


def _kept_shape(shape: tuple, axes: tuple) -> tuple:
    return tuple(1 if i in axes else s for i, s in enumerate(shape))


def reduce(
    shape: Sequence[int],
    dtype: ScalarType,
    buffer: bytes,
    axes: Optional[Sequence[int]] = None,
    keep_axes: bool = False,
    *,
    init: Any,
    fn: FoldFn,
    out_type: Optional[ScalarType] = None,
    finalize: Optional[Finalize] = None,
) -> ArrayData:
    """
    Fold ``axes`` of an array.

    Parameters
    ----------
    shape, dtype, buffer : ...
        Source array.
    axes : Sequence[int] or None
        Axes to reduce. None reduces every axis into a scalar.
    keep_axes : bool
        Keep reduced axes as size-1 dimensions.
    init : Any
        Initial accumulator of every output element.
    fn : Callable[[Any, Any], Any]
        Fold step ``fn(value, acc) -> acc``.
    out_type : ScalarType or None
        Output element type; defaults to ``dtype``.
    finalize : Callable[[Any, int], Any] or None
        Applied to each final accumulator with the group size.

    Returns
    -------
    ArrayData
        Reduced array.
    """
    check_buffer(shape, dtype, buffer)
    shape = tuple(shape)
    picked = normalize_axes(axes, len(shape))
    out_type = dtype if out_type is None else out_type

    traverser = View.build(shape).aggregate(picked).with_type(dtype).build_traverser()
    traverser.check_bounds(buffer)

    values = decode_all(buffer, dtype)
    enc = codec_for(out_type).encode
    group = traverser.group_size

    def chunk(start: int, stop: int) -> bytes:
        accs = traverser.fold(values, init, fn, start, stop)
        if finalize is not None:
            accs = [finalize(acc, group) for acc in accs]
        return b"".join(enc(acc) for acc in accs)

    out_shape = _kept_shape(shape, picked) if keep_axes else traverser.shape
    return ArrayData(out_shape, out_type, materialize(traverser.count, chunk))


def reduce_named(
    name: str,
    shape: Sequence[int],
    dtype: ScalarType,
    buffer: bytes,
    axes: Optional[Sequence[int]] = None,
    keep_axes: bool = False,
    out_type: Optional[ScalarType] = None,
) -> ArrayData:
    """Run the reduction registered under ``name``."""
    entry = reductions.get(name)
    return reduce(
        shape,
        dtype,
        buffer,
        axes,
        keep_axes,
        init=entry.meta["init"](dtype),
        fn=entry.fn,
        out_type=out_type or result_type(entry.meta["result"], dtype),
        finalize=entry.meta.get("finalize"),
    )


def reduce_sum(shape, dtype, buffer, axes=None, keep_axes=False) -> ArrayData:
    return reduce_named("sum", shape, dtype, buffer, axes, keep_axes)


def reduce_product(shape, dtype, buffer, axes=None, keep_axes=False) -> ArrayData:
    return reduce_named("product", shape, dtype, buffer, axes, keep_axes)


def reduce_max(shape, dtype, buffer, axes=None, keep_axes=False) -> ArrayData:
    return reduce_named("max", shape, dtype, buffer, axes, keep_axes)


def reduce_min(shape, dtype, buffer, axes=None, keep_axes=False) -> ArrayData:
    return reduce_named("min", shape, dtype, buffer, axes, keep_axes)


def reduce_mean(shape, dtype, buffer, axes=None, keep_axes=False) -> ArrayData:
    return reduce_named("mean", shape, dtype, buffer, axes, keep_axes)


def reduce_all(shape, dtype, buffer, axes=None, keep_axes=False) -> ArrayData:
    return reduce_named("all", shape, dtype, buffer, axes, keep_axes)


def reduce_any(shape, dtype, buffer, axes=None, keep_axes=False) -> ArrayData:
    return reduce_named("any", shape, dtype, buffer, axes, keep_axes)
