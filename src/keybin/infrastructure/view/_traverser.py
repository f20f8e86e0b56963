"""
Traversers: realize a weighted shape as an ordered offset sequence.

A `Traverser` is a stateless plan. For every emitted position (row-major
over the weighted shape's ``dims``) it yields the group of source offsets
folded into that position; reduced axes form the inner loop of each group.
With no reduced axes every group holds exactly one offset.

Offsets are element indices internally. When a scalar type is attached,
the public iterator reports byte offsets (``index * byte_width``).

The traverser never reads data on its own initiative; `read` and `reduce`
take the source buffer explicitly, decode it through the codec and return
freshly allocated results.
"""

from __future__ import annotations

from itertools import product
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple

from ...domain._errors import IndexOutOfRangeError
from ...domain._types import ScalarType
from ..codec._scalar import codec_for, decode_all
from ._weighted_shape import Axis, WeightedShape

FoldFn = Callable[[Any, Any], Any]


def _axis_offsets(axes: Sequence[Axis]) -> List[int]:
    ranges = [[i * step for i in range(size)] for size, step in axes]
    return [sum(combo) for combo in product(*ranges)]


class Traverser:
    """
    Iteration plan over a `WeightedShape`.

    Parameters
    ----------
    weighted_shape : WeightedShape
        Descriptor to realize.
    dtype : ScalarType or None
        Element type of the source buffer. Required by `read`, `reduce` and
        byte-offset iteration; element-index methods work without it.
    """

    __slots__ = ("weighted_shape", "dtype", "_width", "_inner")

    def __init__(self, weighted_shape: WeightedShape, dtype: Optional[ScalarType] = None) -> None:
        self.weighted_shape = weighted_shape
        self.dtype = dtype
        self._width = codec_for(dtype).dtype.byte_width if dtype is not None else 1
        self._inner = _axis_offsets(weighted_shape.reduced)

    def __repr__(self) -> str:
        ws = self.weighted_shape
        return (
            f"Traverser(dims={ws.dims}, offset={ws.offset}, "
            f"reduced={ws.reduced}, dtype={self.dtype})"
        )

    @property
    def shape(self) -> Tuple[int, ...]:
        """Logical shape of the emitted positions."""
        return self.weighted_shape.shape

    @property
    def count(self) -> int:
        """Number of emitted positions."""
        return self.weighted_shape.element_count

    @property
    def group_size(self) -> int:
        return len(self._inner)

    def is_identity(self) -> bool:
        return self.weighted_shape.is_identity()

    # ------------------------------------------------------------------
    # Offsets
    # ------------------------------------------------------------------
    def _outer(self, start: int, stop: int) -> Iterator[int]:
        ws = self.weighted_shape
        base = ws.offset
        if start == 0 and stop == self.count:
            for off in _axis_offsets(ws.dims):
                yield base + off
            return

        dims = tuple(reversed(ws.dims))
        for k in range(start, stop):
            off = base
            rem = k
            for size, step in dims:
                rem, i = divmod(rem, size)
                off += i * step
            yield off

    def _range(self, start: int, stop: Optional[int]) -> Tuple[int, int]:
        count = self.count
        stop = count if stop is None else min(stop, count)
        return max(start, 0), stop

    def groups(self, start: int = 0, stop: Optional[int] = None) -> Iterator[List[int]]:
        """
        Yield, for each emitted position in ``[start, stop)``, the list of
        source element indices folded into it.
        """
        start, stop = self._range(start, stop)
        inner = self._inner
        for base in self._outer(start, stop):
            yield [base + off for off in inner]

    def indices(self, start: int = 0, stop: Optional[int] = None) -> Iterator[int]:
        """Flattened element indices, groups concatenated in order."""
        start, stop = self._range(start, stop)
        inner = self._inner
        if inner == [0]:
            yield from self._outer(start, stop)
            return
        for base in self._outer(start, stop):
            for off in inner:
                yield base + off

    def __iter__(self) -> Iterator[int]:
        """Flattened offsets, in bytes when a type is attached."""
        width = self._width
        for index in self.indices():
            yield index * width

    # ------------------------------------------------------------------
    # Bounds
    # ------------------------------------------------------------------
    def bounds(self) -> Optional[Tuple[int, int]]:
        """
        Lowest and highest element index the traversal reads, or None when
        it reads nothing.
        """
        ws = self.weighted_shape
        axes = ws.dims + ws.reduced
        if any(size == 0 for size, _ in axes):
            return None
        low = high = ws.offset
        for size, step in axes:
            span = (size - 1) * step
            if span < 0:
                low += span
            else:
                high += span
        return low, high

    def check_bounds(self, buffer: bytes) -> None:
        """
        Verify every offset lies inside ``buffer``.

        Raises
        ------
        IndexOutOfRangeError
            If any offset would fall outside ``[0, len(buffer))``.
        """
        limits = self.bounds()
        if limits is None:
            return
        available = len(buffer) // self._width
        low, high = limits
        if low < 0:
            raise IndexOutOfRangeError(low, available, "traverser")
        if high >= available:
            raise IndexOutOfRangeError(high, available, "traverser")

    def _prepare(self, buffer: bytes) -> None:
        if self.dtype is None:
            raise TypeError("Traverser needs a scalar type to read a buffer")
        self.check_bounds(buffer)

    # ------------------------------------------------------------------
    # Materialization
    # ------------------------------------------------------------------
    def read(self, buffer: bytes, start: int = 0, stop: Optional[int] = None) -> bytes:
        """
        Copy the visited elements of ``buffer`` into a new buffer, in
        traversal order.

        The identity traversal over the full range returns ``buffer`` as an
        immutable ``bytes`` object without copying element by element.
        """
        self._prepare(buffer)
        start, stop = self._range(start, stop)
        width = self._width
        if self.is_identity():
            return bytes(buffer[start * width : stop * width])
        data = bytes(buffer)
        return b"".join(
            data[i * width : (i + 1) * width] for i in self.indices(start, stop)
        )

    def fold(
        self,
        values: Sequence[Any],
        init: Any,
        fn: FoldFn,
        start: int = 0,
        stop: Optional[int] = None,
    ) -> List[Any]:
        """
        Fold each group of already-decoded ``values`` with ``fn(value, acc)``.
        """
        out = []
        for group in self.groups(start, stop):
            acc = init
            for index in group:
                acc = fn(values[index], acc)
            out.append(acc)
        return out

    def reduce(
        self,
        buffer: bytes,
        init: Any,
        fn: FoldFn,
        start: int = 0,
        stop: Optional[int] = None,
    ) -> List[Any]:
        """
        Decode ``buffer`` and fold each group, returning one accumulator per
        emitted position in ``[start, stop)``.
        """
        self._prepare(buffer)
        return self.fold(decode_all(buffer, self.dtype), init, fn, start, stop)
