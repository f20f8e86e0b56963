"""
Array operations over (shape, scalar type, flat buffer) triples.

Every operation returns an `ArrayData`; inputs are never mutated.
"""

from ._contraction_ops import dot, outer
from ._creation_ops import eye, full, iota
from ._elementwise_ops import as_type, binary, binary_ops, map_values, unary, unary_ops
from ._parallel import materialize, partition
from ._reduction_ops import (
    reduce,
    reduce_all,
    reduce_any,
    reduce_max,
    reduce_mean,
    reduce_min,
    reduce_named,
    reduce_product,
    reduce_sum,
    reductions,
)
from ._shape_ops import broadcast, resolve, reshape, reverse, slice_axes, squeeze, transpose
from ._window_ops import (
    window_max,
    window_mean,
    window_min,
    window_reduce,
    window_reduce_named,
    window_sum,
)

__all__ = [
    "dot",
    "outer",
    "eye",
    "full",
    "iota",
    "as_type",
    "binary",
    "binary_ops",
    "map_values",
    "unary",
    "unary_ops",
    "materialize",
    "partition",
    "reduce",
    "reduce_all",
    "reduce_any",
    "reduce_max",
    "reduce_mean",
    "reduce_min",
    "reduce_named",
    "reduce_product",
    "reduce_sum",
    "reductions",
    "broadcast",
    "resolve",
    "reshape",
    "reverse",
    "slice_axes",
    "squeeze",
    "transpose",
    "window_max",
    "window_mean",
    "window_min",
    "window_reduce",
    "window_reduce_named",
    "window_sum",
]
