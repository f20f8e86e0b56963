"""
Weighted shapes: compact traversal descriptors over flat buffers.

A weighted shape pairs every emitted axis with its size and a *step*: the
number of elements the read cursor advances in the source buffer when that
axis' logical index increments by one. Together with a starting offset and
an ordered list of reduced axes, this is enough to describe transposition,
reversal, broadcasting, dilation and sub-ranging without touching data.

Every function in this module is pure: it takes a `WeightedShape` and
returns a new one. Composing transforms is therefore equivalent to building
the combined descriptor directly.

Step semantics
--------------
- positive : forward traversal
- negative : reversed axis (offset moved to the last element)
- zero     : broadcast, the same element repeats along the axis
- scaled   : dilation, gaps between logical positions
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from ...domain._errors import ShapeMismatchError
from ...domain._shape import element_count, normalize_axes, row_major_steps

Axis = Tuple[int, int]
"""A ``(size, step)`` pair."""


@dataclass(frozen=True)
class WeightedShape:
    """
    Immutable traversal descriptor.

    Attributes
    ----------
    dims : tuple[tuple[int, int], ...]
        ``(size, step)`` of each emitted axis, outermost first.
    offset : int
        Element offset of the first visited element.
    reduced : tuple[tuple[int, int], ...]
        ``(size, step)`` of each axis consumed into an accumulator, visited
        as the inner loop for every emitted position.
    """

    dims: Tuple[Axis, ...]
    offset: int = 0
    reduced: Tuple[Axis, ...] = ()

    @property
    def shape(self) -> Tuple[int, ...]:
        """Logical shape of the emitted (non-reduced) axes."""
        return tuple(size for size, _ in self.dims)

    @property
    def steps(self) -> Tuple[int, ...]:
        return tuple(step for _, step in self.dims)

    @property
    def rank(self) -> int:
        return len(self.dims)

    @property
    def element_count(self) -> int:
        """Number of emitted positions."""
        return element_count(self.shape)

    @property
    def group_size(self) -> int:
        """Number of source elements folded into each emitted position."""
        return element_count(size for size, _ in self.reduced)

    def is_identity(self) -> bool:
        """
        True when traversal visits a row-major buffer of ``shape`` in order,
        i.e. the source can be passed through unchanged.
        """
        return (
            self.offset == 0
            and not self.reduced
            and self.steps == row_major_steps(self.shape)
        )


def build(shape: Sequence[int]) -> WeightedShape:
    """Identity descriptor of a row-major array with logical ``shape``."""
    shape = tuple(int(s) for s in shape)
    return WeightedShape(dims=tuple(zip(shape, row_major_steps(shape))))


def aggregate(ws: WeightedShape, axes: Optional[Sequence[int]]) -> WeightedShape:
    """
    Mark ``axes`` as reduced; they no longer appear in the output shape.

    ``None`` reduces every emitted axis. Reduced axes keep their relative
    order and are appended after any axes reduced earlier.
    """
    picked = sorted(set(normalize_axes(axes, ws.rank)))
    kept = tuple(d for i, d in enumerate(ws.dims) if i not in picked)
    moved = tuple(ws.dims[i] for i in picked)
    return WeightedShape(dims=kept, offset=ws.offset, reduced=ws.reduced + moved)


def transpose(ws: WeightedShape, axes: Optional[Sequence[int]] = None) -> WeightedShape:
    """
    Reorder the emitted axes; ``axes[k]`` names the source axis placed at
    position ``k``. ``None`` reverses the axis order.
    """
    if axes is None:
        perm = tuple(reversed(range(ws.rank)))
    else:
        perm = normalize_axes(axes, ws.rank)
    if sorted(perm) != list(range(ws.rank)):
        raise ShapeMismatchError(
            f"{tuple(axes)} is not a permutation of {ws.rank} axes",
            expected=ws.rank,
            actual=tuple(axes),
        )
    return WeightedShape(
        dims=tuple(ws.dims[a] for a in perm), offset=ws.offset, reduced=ws.reduced
    )


def reverse(ws: WeightedShape, axes: Optional[Sequence[int]] = None) -> WeightedShape:
    """
    Visit ``axes`` back-to-front by negating their steps and moving the
    offset to the last element of each.
    """
    picked = set(normalize_axes(axes, ws.rank))
    offset = ws.offset
    dims = []
    for i, (size, step) in enumerate(ws.dims):
        if i in picked:
            if size > 0:
                offset += (size - 1) * step
            step = -step
        dims.append((size, step))
    return WeightedShape(dims=tuple(dims), offset=offset, reduced=ws.reduced)


def _per_axis(value: Union[int, Sequence], rank: int, name: str) -> Tuple:
    if isinstance(value, int):
        return (value,) * rank
    value = tuple(value)
    if len(value) != rank:
        raise ShapeMismatchError(
            f"{name} needs one entry per axis ({rank}), got {len(value)}",
            expected=rank,
            actual=len(value),
        )
    return value


def dilate(ws: WeightedShape, dilation: Union[int, Sequence[int]]) -> WeightedShape:
    """
    Multiply each axis step by its dilation factor.

    The number of emitted positions is unchanged; consecutive logical
    positions of a dilated axis are ``d`` source elements apart.
    """
    factors = _per_axis(dilation, ws.rank, "dilation")
    dims = tuple((size, step * d) for (size, step), d in zip(ws.dims, factors))
    return WeightedShape(dims=dims, offset=ws.offset, reduced=ws.reduced)


def limit(ws: WeightedShape, limits: Sequence[Optional[int]]) -> WeightedShape:
    """
    Restrict each axis to the range ``[0, limit)``; ``None`` keeps the axis
    whole.
    """
    bounds = _per_axis(limits, ws.rank, "limits")
    dims = tuple(
        (size if lim is None else int(lim), step)
        for (size, step), lim in zip(ws.dims, bounds)
    )
    return WeightedShape(dims=dims, offset=ws.offset, reduced=ws.reduced)


def shift(ws: WeightedShape, starts: Sequence[int]) -> WeightedShape:
    """
    Move the origin of each axis forward by ``starts[k]`` logical positions.

    Sizes are unchanged, so a shift is normally followed by `limit`.
    """
    begins = _per_axis(starts, ws.rank, "starts")
    offset = ws.offset + sum(b * step for b, (_, step) in zip(begins, ws.dims))
    return WeightedShape(dims=ws.dims, offset=offset, reduced=ws.reduced)


def broadcast(
    ws: WeightedShape, shape: Sequence[int], axes: Optional[Sequence[int]] = None
) -> WeightedShape:
    """
    Map the emitted axes onto the larger logical ``shape``.

    Parameters
    ----------
    ws : WeightedShape
        Source descriptor.
    shape : Sequence[int]
        Target logical shape.
    axes : Sequence[int] or None
        Target axis of each source axis (ascending). Defaults to right
        alignment: the source axes map onto the trailing target axes.

    Notes
    -----
    Target axes with no source axis, and source axes of size 1 stretched to
    a larger size, get step 0 so their single element repeats.
    """
    shape = tuple(int(s) for s in shape)
    if axes is None:
        axes = tuple(range(len(shape) - ws.rank, len(shape)))
    else:
        axes = normalize_axes(axes, len(shape))
    if len(axes) != ws.rank:
        raise ShapeMismatchError(
            f"Broadcast axes {tuple(axes)} must name one target axis per source axis ({ws.rank})",
            expected=ws.rank,
            actual=len(axes),
        )

    source = dict(zip(axes, ws.dims))
    dims = []
    for t, target in enumerate(shape):
        if t not in source:
            dims.append((target, 0))
            continue
        size, step = source[t]
        if size == target:
            dims.append((size, step))
        elif size == 1:
            dims.append((target, 0))
        else:
            raise ShapeMismatchError(
                f"Cannot broadcast axis of size {size} to {target} (target shape {shape})",
                expected=target,
                actual=size,
            )
    return WeightedShape(dims=tuple(dims), offset=ws.offset, reduced=ws.reduced)


def window(
    ws: WeightedShape,
    window_shape: Sequence[int],
    strides: Union[int, Sequence[int]] = 1,
    dilations: Union[int, Sequence[int]] = 1,
) -> WeightedShape:
    """
    Describe a sliding-window aggregation over the emitted axes.

    The result emits one position per window placement: axis ``k`` has
    ``(size_k - span_k) // stride_k + 1`` placements, where
    ``span_k = (window_k - 1) * dilation_k + 1``. Each placement folds the
    ``window_k`` elements of its window, ``dilation_k`` apart, as reduced
    axes.
    """
    sizes = _per_axis(window_shape, ws.rank, "window")
    steps = _per_axis(strides, ws.rank, "strides")
    gaps = _per_axis(dilations, ws.rank, "dilations")

    placements = [
        (size - ((w - 1) * d + 1)) // s + 1 if size >= (w - 1) * d + 1 else 0
        for (size, _), w, s, d in zip(ws.dims, sizes, steps, gaps)
    ]

    outer = dilate(limit(ws, placements), steps)
    inner = dilate(limit(ws, sizes), gaps)
    return WeightedShape(
        dims=outer.dims, offset=ws.offset, reduced=ws.reduced + inner.dims
    )
