"""
Row-major shape arithmetic shared by every layer.

These helpers are pure functions over tuples of ints. They do not validate
the *domain* legality of an operation (e.g. that a reduced axis exists);
that is the caller's responsibility.
"""

from __future__ import annotations

from typing import NamedTuple, Optional, Sequence, Tuple

from ._errors import ShapeMismatchError

Shape = Tuple[int, ...]


class Weights(NamedTuple):
    """
    Row-major weights of a logical shape.

    Attributes
    ----------
    sizes : tuple[int, ...]
        The logical shape.
    steps : tuple[int, ...]
        Element stride of each axis; the weight of axis ``k`` is the product
        of the sizes of the axes after ``k``.
    """

    sizes: Shape
    steps: Shape

    @property
    def total_extent(self) -> int:
        """Extent spanned by axis 0 (``size(axis 0) * weight(axis 0)``)."""
        if not self.sizes:
            return 1
        return self.sizes[0] * self.steps[0]


def element_count(shape: Sequence[int]) -> int:
    """Product of all dimension sizes (1 for a scalar shape)."""
    count = 1
    for size in shape:
        count *= size
    return count


def row_major_steps(shape: Sequence[int]) -> Shape:
    steps = []
    acc = 1
    for size in reversed(tuple(shape)):
        steps.append(acc)
        acc *= size
    return tuple(reversed(steps))


def weights(shape: Sequence[int]) -> Weights:
    """Build the `Weights` record for ``shape``."""
    shape = tuple(int(s) for s in shape)
    return Weights(sizes=shape, steps=row_major_steps(shape))


def flat_index(shape: Sequence[int], index: Sequence[int]) -> int:
    """Convert a multi-index into its row-major flat position."""
    if len(index) != len(shape):
        raise ShapeMismatchError(
            f"Index {tuple(index)} has rank {len(index)}, shape {tuple(shape)} has rank {len(shape)}",
            expected=len(shape),
            actual=len(index),
        )
    return sum(i * w for i, w in zip(index, row_major_steps(shape)))


def normalize_axis(axis: int, rank: int) -> int:
    return axis + rank if axis < 0 else axis


def normalize_axes(axes: Optional[Sequence[int]], rank: int) -> Tuple[int, ...]:
    """
    Normalize possibly-negative axes; ``None`` selects every axis.
    """
    if axes is None:
        return tuple(range(rank))
    return tuple(normalize_axis(int(a), rank) for a in axes)


def broadcast_shapes(a: Sequence[int], b: Sequence[int]) -> Shape:
    """
    Compute the common shape of two operands under right-aligned
    broadcasting rules.

    Raises
    ------
    ShapeMismatchError
        If a pair of aligned dimensions differs and neither is 1.
    """
    a, b = tuple(a), tuple(b)
    rank = max(len(a), len(b))
    a = (1,) * (rank - len(a)) + a
    b = (1,) * (rank - len(b)) + b

    out = []
    for da, db in zip(a, b):
        if da == db or db == 1:
            out.append(da)
        elif da == 1:
            out.append(db)
        else:
            raise ShapeMismatchError(
                f"Cannot broadcast shapes {a} and {b}", expected=a, actual=b
            )
    return tuple(out)
