"""
Layout-changing operations: reshape, squeeze, transpose, reverse,
broadcast and strided slicing.

Each function takes a logical shape, a scalar type and a flat buffer and
returns a new `ArrayData`. Operations that do not move any element (reshape,
squeeze, identity transposes) pass the immutable input buffer through.
Everything else builds a `View`, folds the transform into it and lets a
`Traverser` copy the visited elements into a fresh buffer.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ...domain._array import ArrayData
from ...domain._errors import ShapeMismatchError
from ...domain._shape import element_count, normalize_axes, weights
from ...domain._types import ScalarType
from ..codec._bits import axis_component, check_buffer
from ..codec._scalar import byte_width
from ..view._view import View
from ._parallel import materialize

logger = logging.getLogger(__name__)


def resolve(view: View, dtype: ScalarType, buffer: bytes) -> bytes:
    """
    Materialize ``view`` against ``buffer``.

    If the view's descriptor is the identity the buffer is returned as-is;
    otherwise a traverser copies the visited elements into a new buffer.
    """
    if not view.must_be_resolved():
        logger.debug("Identity view %s, passing buffer through", view.shape)
        return bytes(buffer)

    traverser = view.with_type(dtype).build_traverser()
    traverser.check_bounds(buffer)
    return materialize(traverser.count, lambda s, e: traverser.read(buffer, s, e))


def reshape(
    shape: Sequence[int], dtype: ScalarType, buffer: bytes, new_shape: Sequence[int]
) -> ArrayData:
    """
    Reinterpret ``buffer`` with ``new_shape``.

    A single ``-1`` entry is inferred from the remaining sizes.

    Raises
    ------
    ShapeMismatchError
        If the element counts differ or ``-1`` cannot be inferred.
    """
    count = check_buffer(shape, dtype, buffer)
    new_shape = tuple(int(s) for s in new_shape)

    if new_shape.count(-1) > 1:
        raise ShapeMismatchError(f"Only one axis can be inferred in {new_shape}")
    if -1 in new_shape:
        known = element_count(s for s in new_shape if s != -1)
        if known == 0 or count % known != 0:
            raise ShapeMismatchError(
                f"Cannot infer axis of {new_shape} for {count} elements",
                expected=count,
                actual=new_shape,
            )
        new_shape = tuple(count // known if s == -1 else s for s in new_shape)

    if element_count(new_shape) != count:
        raise ShapeMismatchError(
            f"Cannot reshape {tuple(shape)} ({count} elements) into {new_shape}",
            expected=count,
            actual=element_count(new_shape),
        )
    return ArrayData(new_shape, dtype, bytes(buffer))


def squeeze(
    shape: Sequence[int],
    dtype: ScalarType,
    buffer: bytes,
    axes: Optional[Sequence[int]] = None,
) -> ArrayData:
    """Drop size-1 axes (all of them, or only ``axes``)."""
    check_buffer(shape, dtype, buffer)
    shape = tuple(shape)
    if axes is None:
        picked = {i for i, s in enumerate(shape) if s == 1}
    else:
        picked = set(normalize_axes(axes, len(shape)))
        for a in picked:
            if shape[a] != 1:
                raise ShapeMismatchError(
                    f"Cannot squeeze axis {a} of size {shape[a]}",
                    expected=1,
                    actual=shape[a],
                )
    new_shape = tuple(s for i, s in enumerate(shape) if i not in picked)
    return ArrayData(new_shape, dtype, bytes(buffer))


def transpose(
    shape: Sequence[int],
    dtype: ScalarType,
    buffer: bytes,
    axes: Optional[Sequence[int]] = None,
) -> ArrayData:
    """
    Permute axes; ``axes[k]`` is the input axis placed at output position
    ``k``. ``None`` reverses the axis order.
    """
    check_buffer(shape, dtype, buffer)
    view = View.build(shape).transpose(axes)
    return ArrayData(view.shape, dtype, resolve(view, dtype, buffer))


def reverse(
    shape: Sequence[int],
    dtype: ScalarType,
    buffer: bytes,
    axes: Optional[Sequence[int]] = None,
) -> ArrayData:
    """Reverse the element order along ``axes`` (all axes when None)."""
    check_buffer(shape, dtype, buffer)
    view = View.build(shape).reverse(axes)
    return ArrayData(view.shape, dtype, resolve(view, dtype, buffer))


def _is_suffix(shape: tuple, target: tuple) -> bool:
    return 0 < len(shape) <= len(target) and target[len(target) - len(shape) :] == shape


def broadcast(
    shape: Sequence[int],
    dtype: ScalarType,
    buffer: bytes,
    target_shape: Sequence[int],
    axes: Optional[Sequence[int]] = None,
) -> ArrayData:
    """
    Repeat ``buffer`` to fill ``target_shape``.

    Parameters
    ----------
    shape, dtype, buffer : ...
        Source array.
    target_shape : Sequence[int]
        Shape of the result.
    axes : Sequence[int] or None
        Target axis of each source axis. Defaults to right alignment.

    Notes
    -----
    When the source shape equals the trailing dimensions of the target, the
    result is the source repeated end to end; element ``i`` of the output is
    read from the cyclic position ``axis_component(weights, last_axis, i)``.
    Every other case goes through a zero-step view.
    """
    check_buffer(shape, dtype, buffer)
    shape, target = tuple(shape), tuple(int(s) for s in target_shape)

    if axes is None and _is_suffix(shape, target) and shape != target:
        w = weights(shape)
        last = len(shape) - 1
        width = byte_width(dtype)
        data = bytes(buffer)

        def chunk(start: int, stop: int) -> bytes:
            return b"".join(
                data[p * width : (p + 1) * width]
                for p in (axis_component(w, last, i) for i in range(start, stop))
            )

        logger.debug("Cyclic broadcast %s -> %s", shape, target)
        return ArrayData(target, dtype, materialize(element_count(target), chunk))

    view = View.build(shape).broadcast(target, axes)
    return ArrayData(view.shape, dtype, resolve(view, dtype, buffer))


def slice_axes(
    shape: Sequence[int],
    dtype: ScalarType,
    buffer: bytes,
    starts: Sequence[int],
    lengths: Sequence[int],
    strides: Optional[Sequence[int]] = None,
) -> ArrayData:
    """
    Take a strided sub-range of every axis.

    Axis ``k`` keeps positions ``starts[k], starts[k] + strides[k], ...``
    inside the window ``[starts[k], starts[k] + lengths[k])``, so its output
    size is ``ceil(lengths[k] / strides[k])``.
    """
    check_buffer(shape, dtype, buffer)
    rank = len(tuple(shape))
    strides = (1,) * rank if strides is None else tuple(strides)
    sizes = [(length + stride - 1) // stride for length, stride in zip(lengths, strides)]
    view = View.build(shape).shift(starts).limit(sizes).dilate(strides)
    return ArrayData(view.shape, dtype, resolve(view, dtype, buffer))
