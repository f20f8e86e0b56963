"""
Sliding-window reductions (pooling).

A window reduction is a single weighted shape: emitted axes step over the
window placements (``stride * step``) and reduced axes walk the window
itself (``dilation * step``). Named variants reuse the reduction table.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence, Union

from ...domain._array import ArrayData
from ...domain._shape import element_count
from ...domain._types import ScalarType
from ..codec._bits import check_buffer
from ..codec._scalar import codec_for, decode_all
from ..view._view import View
from ._parallel import materialize
from ._reduction_ops import reductions, result_type

IntOrSeq = Union[int, Sequence[int]]


def window_reduce(
    shape: Sequence[int],
    dtype: ScalarType,
    buffer: bytes,
    window: Sequence[int],
    strides: IntOrSeq = 1,
    *,
    init: Any,
    fn: Callable[[Any, Any], Any],
    window_dilations: IntOrSeq = 1,
    out_type: Optional[ScalarType] = None,
    finalize: Optional[Callable[[Any, int], Any]] = None,
) -> ArrayData:
    """
    Fold every window placement of ``window`` over the array.

    Parameters
    ----------
    shape, dtype, buffer : ...
        Source array.
    window : Sequence[int]
        Window size per axis.
    strides : int or Sequence[int]
        Distance between consecutive placements per axis.
    init, fn : ...
        Fold seed and step ``fn(value, acc) -> acc``.
    window_dilations : int or Sequence[int]
        Gap between window elements per axis.
    out_type : ScalarType or None
        Defaults to ``dtype``.
    finalize : Callable[[Any, int], Any] or None
        Applied to each accumulator with the window element count.

    Returns
    -------
    ArrayData
        One element per placement; output axis ``k`` has
        ``(size_k - span_k) // stride_k + 1`` entries with
        ``span_k = (window_k - 1) * dilation_k + 1``.
    """
    check_buffer(shape, dtype, buffer)
    out_type = dtype if out_type is None else out_type

    view = View.build(shape).window(window, strides, window_dilations).with_type(dtype)
    traverser = view.build_traverser()
    traverser.check_bounds(buffer)

    values = decode_all(buffer, dtype)
    enc = codec_for(out_type).encode
    group = element_count(window)

    def chunk(start: int, stop: int) -> bytes:
        accs = traverser.fold(values, init, fn, start, stop)
        if finalize is not None:
            accs = [finalize(acc, group) for acc in accs]
        return b"".join(enc(acc) for acc in accs)

    return ArrayData(traverser.shape, out_type, materialize(traverser.count, chunk))


def window_reduce_named(
    name: str,
    shape: Sequence[int],
    dtype: ScalarType,
    buffer: bytes,
    window: Sequence[int],
    strides: IntOrSeq = 1,
    window_dilations: IntOrSeq = 1,
) -> ArrayData:
    """Window reduction using the fold registered under ``name``."""
    entry = reductions.get(name)
    return window_reduce(
        shape,
        dtype,
        buffer,
        window,
        strides,
        init=entry.meta["init"](dtype),
        fn=entry.fn,
        window_dilations=window_dilations,
        out_type=result_type(entry.meta["result"], dtype),
        finalize=entry.meta.get("finalize"),
    )


def window_sum(shape, dtype, buffer, window, strides=1, window_dilations=1) -> ArrayData:
    return window_reduce_named("sum", shape, dtype, buffer, window, strides, window_dilations)


def window_max(shape, dtype, buffer, window, strides=1, window_dilations=1) -> ArrayData:
    return window_reduce_named("max", shape, dtype, buffer, window, strides, window_dilations)


def window_min(shape, dtype, buffer, window, strides=1, window_dilations=1) -> ArrayData:
    return window_reduce_named("min", shape, dtype, buffer, window, strides, window_dilations)


def window_mean(shape, dtype, buffer, window, strides=1, window_dilations=1) -> ArrayData:
    return window_reduce_named("mean", shape, dtype, buffer, window, strides, window_dilations)
