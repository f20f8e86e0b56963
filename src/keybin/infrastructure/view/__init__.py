"""
Traversal planning: weighted shapes, traversers and views.
"""

from ._weighted_shape import (
    WeightedShape,
    aggregate,
    broadcast,
    build,
    dilate,
    limit,
    reverse,
    shift,
    transpose,
    window,
)
from ._traverser import Traverser
from ._view import View

__all__ = [
    "WeightedShape",
    "aggregate",
    "broadcast",
    "build",
    "dilate",
    "limit",
    "reverse",
    "shift",
    "transpose",
    "window",
    "Traverser",
    "View",
]
