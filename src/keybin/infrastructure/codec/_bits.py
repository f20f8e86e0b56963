"""
Indexed access and paired reduction over flat buffers.

This module builds on the scalar dispatch table to address elements inside
a row-major buffer, either by flat position or by multi-index, and provides
`zip_reduce`, the single primitive underneath outer products, matrix
multiplication and general tensor contraction.
"""

from __future__ import annotations

from itertools import product
from typing import Any, Callable, List, Sequence, Tuple, Union

from ...domain._errors import IndexOutOfRangeError, ShapeMismatchError
from ...domain._shape import (
    Shape,
    Weights,
    element_count,
    flat_index,
    normalize_axes,
    weights,
)
from ...domain._types import ScalarType
from ._scalar import Number, codec_for, decode_all

ReduceFn = Callable[[Number, Number, Any], Any]


def check_buffer(shape: Sequence[int], dtype: ScalarType, buffer: bytes) -> int:
    """
    Ensure ``buffer`` holds exactly ``element_count(shape)`` elements.

    Returns
    -------
    int
        The element count.

    Raises
    ------
    ShapeMismatchError
        If the byte length does not match shape and type.
    """
    count = element_count(shape)
    expected = count * codec_for(dtype).dtype.byte_width
    if len(buffer) != expected:
        raise ShapeMismatchError(
            f"Buffer of {len(buffer)} bytes does not match shape {tuple(shape)} "
            f"with type {dtype} ({expected} bytes)",
            expected=expected,
            actual=len(buffer),
        )
    return count


def read_at(buffer: bytes, dtype: ScalarType, flat: int) -> Number:
    """
    Decode the element at flat position ``flat``.

    Raises
    ------
    IndexOutOfRangeError
        If the element does not lie entirely inside ``buffer``.
    """
    entry = codec_for(dtype)
    width = entry.dtype.byte_width
    start = flat * width
    if flat < 0 or start + width > len(buffer):
        raise IndexOutOfRangeError(flat, len(buffer) // width, "read_at")
    return entry.decode(buffer[start : start + width])


def read_at_index(
    buffer: bytes, shape: Sequence[int], dtype: ScalarType, index: Sequence[int]
) -> Number:
    """
    Decode the element at multi-index ``index`` of a row-major buffer.

    For shape ``(2, 3)`` the weights are ``(3, 1)`` so index ``(i1, i2)``
    reads flat position ``i1 * 3 + i2``.
    """
    for axis, (i, size) in enumerate(zip(index, shape)):
        if not 0 <= i < size:
            raise IndexOutOfRangeError(i, size, f"read_at_index (axis {axis})")
    return read_at(buffer, dtype, flat_index(shape, index))


def read_number(buffer: bytes, *args: Any) -> Number:
    """
    Dispatching accessor.

    ``read_number(buffer, dtype, flat)`` or
    ``read_number(buffer, shape, dtype, index_tuple)``.
    """
    if len(args) == 2:
        return read_at(buffer, args[0], args[1])
    if len(args) == 3:
        return read_at_index(buffer, args[0], args[1], args[2])
    raise TypeError(
        f"read_number expects (buffer, dtype, flat) or (buffer, shape, dtype, index), got {len(args) + 1} arguments"
    )


def weight_of_axis(w: Union[Weights, Sequence[int]], axis: int) -> int:
    """Look up the row-major weight of ``axis``."""
    steps = w.steps if isinstance(w, Weights) else w
    return steps[axis]


def axis_component(w: Weights, axis: int, i: int) -> int:
    """
    Position contribution of ``axis`` for flat traversal counter ``i``.

    Computed as ``(i * weight_of_axis(w, axis)) mod total_extent`` where
    ``total_extent = size(axis 0) * weight_of_axis(w, 0)``. The result is
    cyclic in ``i`` which lets a short axis repeat its values across a
    longer traversal than its own extent.

    For shape ``(2, 3)``: axis 0 yields ``0, 3, 0, 3, ...`` and axis 1
    yields ``0, 1, 2, 3, 4, 5`` for ``i = 0..5``.
    """
    total = w.total_extent
    if total == 0:
        return 0
    return (i * weight_of_axis(w, axis)) % total


def _axis_offsets(w: Weights, axes: Sequence[int]) -> List[int]:
    """Row-major enumeration of the flat offsets spanned by ``axes``."""
    ranges = [[i * w.steps[a] for i in range(w.sizes[a])] for a in axes]
    return [sum(combo) for combo in product(*ranges)]


def _contracted_axes(axes: Sequence[int], shape: Shape) -> Tuple[int, ...]:
    out = normalize_axes(axes, len(shape))
    for axis, norm in zip(axes, out):
        if not 0 <= norm < len(shape):
            raise ShapeMismatchError(
                f"Contracted axis {axis} is out of range for shape {shape}"
            )
    if len(set(out)) != len(out):
        raise ShapeMismatchError(f"Contracted axes {tuple(axes)} repeat an axis")
    return out


def zip_reduce(
    out_type: ScalarType,
    shape1: Sequence[int],
    type1: ScalarType,
    buffer1: bytes,
    axes1: Sequence[int],
    shape2: Sequence[int],
    type2: ScalarType,
    buffer2: bytes,
    axes2: Sequence[int],
    init: Any,
    fn: ReduceFn,
) -> bytes:
    """
    Pair elements of two arrays along contracted axes and reduce them.

    The axes of each input that are not listed as contracted ("free" axes)
    become the output dimensions: the free axes of input 1 followed by the
    free axes of input 2, each in their original order. For every
    combination of free indices, the contracted index space is visited in
    row-major order with ``axes1[k]`` moving in lockstep with ``axes2[k]``,
    and ``fn(elem1, elem2, acc)`` is folded starting from ``init``. The final
    accumulator becomes one element of ``out_type``.

    With empty axis lists this is an outer product; contracting axis 1 of an
    ``(n, k)`` input with axis 0 of a ``(k, m)`` input is a matrix product.

    Parameters
    ----------
    out_type : ScalarType
        Element type of the returned buffer.
    shape1, type1, buffer1 : ...
        First operand.
    axes1 : Sequence[int]
        Contracted axes of the first operand.
    shape2, type2, buffer2 : ...
        Second operand.
    axes2 : Sequence[int]
        Contracted axes of the second operand, paired positionally with
        ``axes1``.
    init : Any
        Initial accumulator for every output element.
    fn : Callable[[Number, Number, Any], Any]
        Reducer called as ``fn(elem1, elem2, acc)``.

    Returns
    -------
    bytes
        The output buffer, row-major over (free1 + free2).

    Raises
    ------
    ShapeMismatchError
        If the axis lists differ in length, an axis is out of range or
        repeated, paired extents differ, or a buffer does not match its
        shape. Negative axes count from the end.
    """
    shape1, shape2 = tuple(shape1), tuple(shape2)
    axes1, axes2 = _contracted_axes(axes1, shape1), _contracted_axes(axes2, shape2)
    if len(axes1) != len(axes2):
        raise ShapeMismatchError(
            f"Contracted axes {axes1} and {axes2} must have the same length",
            expected=len(axes1),
            actual=len(axes2),
        )
    for a1, a2 in zip(axes1, axes2):
        if shape1[a1] != shape2[a2]:
            raise ShapeMismatchError(
                f"Contracted axis {a1} of {shape1} and axis {a2} of {shape2} differ in size",
                expected=shape1[a1],
                actual=shape2[a2],
            )

    check_buffer(shape1, type1, buffer1)
    check_buffer(shape2, type2, buffer2)

    w1, w2 = weights(shape1), weights(shape2)
    free1 = [a for a in range(len(shape1)) if a not in axes1]
    free2 = [a for a in range(len(shape2)) if a not in axes2]

    values1 = decode_all(buffer1, type1)
    values2 = decode_all(buffer2, type2)

    free_offsets1 = _axis_offsets(w1, free1)
    free_offsets2 = _axis_offsets(w2, free2)
    pairs = list(zip(_axis_offsets(w1, axes1), _axis_offsets(w2, axes2)))

    enc = codec_for(out_type).encode
    out = []
    for f1 in free_offsets1:
        for f2 in free_offsets2:
            acc = init
            for c1, c2 in pairs:
                acc = fn(values1[f1 + c1], values2[f2 + c2], acc)
            out.append(enc(acc))
    return b"".join(out)
