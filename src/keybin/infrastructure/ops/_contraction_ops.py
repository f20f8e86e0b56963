"""
Contractions built on `zip_reduce`: dot products with optional batch axes
and the flattened outer product.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from ...domain._array import ArrayData
from ...domain._errors import ShapeMismatchError
from ...domain._shape import element_count, normalize_axes
from ...domain._types import ScalarType, merge_types
from ..codec._bits import check_buffer, zip_reduce
from ..codec._scalar import byte_width
from ._shape_ops import transpose


def _multiply_add(a: Any, b: Any, acc: Any) -> Any:
    return acc + a * b


def _free_dims(shape: tuple, skip: Sequence[int]) -> tuple:
    return tuple(s for i, s in enumerate(shape) if i not in skip)


def dot(
    shape1: Sequence[int],
    type1: ScalarType,
    buffer1: bytes,
    axes1: Sequence[int],
    shape2: Sequence[int],
    type2: ScalarType,
    buffer2: bytes,
    axes2: Sequence[int],
    batch_axes1: Sequence[int] = (),
    batch_axes2: Sequence[int] = (),
    out_type: Optional[ScalarType] = None,
    init: Any = 0,
    fn: Callable[[Any, Any, Any], Any] = _multiply_add,
) -> ArrayData:
    """
    Generalized tensor contraction.

    Parameters
    ----------
    shape1, type1, buffer1 : ...
        Left operand.
    axes1 : Sequence[int]
        Contracted axes of the left operand.
    shape2, type2, buffer2 : ...
        Right operand.
    axes2 : Sequence[int]
        Contracted axes of the right operand, paired with ``axes1``.
    batch_axes1, batch_axes2 : Sequence[int]
        Axes iterated in lockstep and kept as leading output dimensions.
    out_type : ScalarType or None
        Defaults to the promoted operand type.
    init, fn : ...
        Accumulator seed and ``fn(a, b, acc)`` step; multiply-accumulate
        by default.

    Returns
    -------
    ArrayData
        Shape ``batch dims + free dims of 1 + free dims of 2``.
    """
    shape1, shape2 = tuple(shape1), tuple(shape2)
    axes1 = normalize_axes(axes1, len(shape1))
    axes2 = normalize_axes(axes2, len(shape2))
    batch1 = normalize_axes(batch_axes1, len(shape1))
    batch2 = normalize_axes(batch_axes2, len(shape2))
    out_type = out_type or merge_types(type1, type2)

    if not batch1 and not batch2:
        data = zip_reduce(
            out_type, shape1, type1, buffer1, axes1,
            shape2, type2, buffer2, axes2, init, fn,
        )
        out_shape = _free_dims(shape1, axes1) + _free_dims(shape2, axes2)
        return ArrayData(out_shape, out_type, data)

    if len(batch1) != len(batch2):
        raise ShapeMismatchError(
            f"Batch axes {batch1} and {batch2} must have the same length",
            expected=len(batch1),
            actual=len(batch2),
        )
    batch_dims = tuple(shape1[a] for a in batch1)
    if batch_dims != tuple(shape2[a] for a in batch2):
        raise ShapeMismatchError(
            f"Batch dimensions of {shape1} and {shape2} differ",
            expected=batch_dims,
            actual=tuple(shape2[a] for a in batch2),
        )

    # Move batch axes to the front so each batch is a contiguous block.
    perm1 = batch1 + tuple(a for a in range(len(shape1)) if a not in batch1)
    perm2 = batch2 + tuple(a for a in range(len(shape2)) if a not in batch2)
    left = transpose(shape1, type1, buffer1, perm1)
    right = transpose(shape2, type2, buffer2, perm2)

    rest1 = left.shape[len(batch1) :]
    rest2 = right.shape[len(batch2) :]
    local1 = tuple(perm1.index(a) - len(batch1) for a in axes1)
    local2 = tuple(perm2.index(a) - len(batch2) for a in axes2)
    block1 = element_count(rest1) * byte_width(type1)
    block2 = element_count(rest2) * byte_width(type2)

    parts = []
    for b in range(element_count(batch_dims)):
        parts.append(
            zip_reduce(
                out_type,
                rest1, type1, left.buffer[b * block1 : (b + 1) * block1], local1,
                rest2, type2, right.buffer[b * block2 : (b + 1) * block2], local2,
                init, fn,
            )
        )

    out_shape = batch_dims + _free_dims(rest1, local1) + _free_dims(rest2, local2)
    return ArrayData(out_shape, out_type, b"".join(parts))


def outer(
    shape1: Sequence[int],
    type1: ScalarType,
    buffer1: bytes,
    shape2: Sequence[int],
    type2: ScalarType,
    buffer2: bytes,
    out_type: Optional[ScalarType] = None,
) -> ArrayData:
    """
    Outer product of the flattened operands, shape ``(size1, size2)``.
    """
    n1 = check_buffer(shape1, type1, buffer1)
    n2 = check_buffer(shape2, type2, buffer2)
    out_type = out_type or merge_types(type1, type2)
    data = zip_reduce(
        out_type, (n1,), type1, buffer1, (), (n2,), type2, buffer2, (), 0, _multiply_add
    )
    return ArrayData((n1, n2), out_type, data)
