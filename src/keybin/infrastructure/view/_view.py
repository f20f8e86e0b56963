"""
View façade over the weighted-shape algebra.

A `View` bundles a traversal descriptor with an optional target scalar
type. Each transform method folds the transform into the descriptor
immediately and returns a new View flagged as changed; nothing is deferred.
Callers use `has_changes()` / `must_be_resolved()` to skip traversal
entirely and pass the source buffer through when no real work is needed.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple, Union

from ...domain._types import ScalarType
from . import _weighted_shape as wsa
from ._traverser import Traverser
from ._weighted_shape import WeightedShape


@dataclass(frozen=True)
class View:
    """
    Ephemeral (descriptor, type, changed-flag) triple.

    Attributes
    ----------
    weighted_shape : WeightedShape
        Current traversal descriptor.
    dtype : ScalarType or None
        Scalar type attached for traversal.
    changed : bool
        True once any transform has been applied, even one that turned out
        to be a no-op.
    source_size : int or None
        Element count of the array the view was built from.
    """

    weighted_shape: WeightedShape
    dtype: Optional[ScalarType] = None
    changed: bool = False
    source_size: Optional[int] = None

    @classmethod
    def build(cls, shape: Sequence[int]) -> "View":
        ws = wsa.build(shape)
        return cls(weighted_shape=ws, source_size=ws.element_count)

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.weighted_shape.shape

    def has_changes(self) -> bool:
        return self.changed

    def must_be_resolved(self) -> bool:
        """
        True when a traverser must be built to materialize the view, i.e.
        the descriptor is not a row-major walk over the whole source.
        """
        ws = self.weighted_shape
        if not ws.is_identity():
            return True
        return self.source_size is not None and ws.element_count != self.source_size

    def with_type(self, dtype: ScalarType) -> "View":
        return replace(self, dtype=dtype)

    def _change(self, ws: WeightedShape) -> "View":
        return replace(self, weighted_shape=ws, changed=True)

    def aggregate(self, axes: Optional[Sequence[int]]) -> "View":
        return self._change(wsa.aggregate(self.weighted_shape, axes))

    def transpose(self, axes: Optional[Sequence[int]] = None) -> "View":
        return self._change(wsa.transpose(self.weighted_shape, axes))

    def reverse(self, axes: Optional[Sequence[int]] = None) -> "View":
        return self._change(wsa.reverse(self.weighted_shape, axes))

    def dilate(self, dilation: Union[int, Sequence[int]]) -> "View":
        return self._change(wsa.dilate(self.weighted_shape, dilation))

    def limit(self, limits: Sequence[Optional[int]]) -> "View":
        return self._change(wsa.limit(self.weighted_shape, limits))

    def shift(self, starts: Sequence[int]) -> "View":
        return self._change(wsa.shift(self.weighted_shape, starts))

    def broadcast(self, shape: Sequence[int], axes: Optional[Sequence[int]] = None) -> "View":
        return self._change(wsa.broadcast(self.weighted_shape, shape, axes))

    def window(
        self,
        window_shape: Sequence[int],
        strides: Union[int, Sequence[int]] = 1,
        dilations: Union[int, Sequence[int]] = 1,
    ) -> "View":
        return self._change(wsa.window(self.weighted_shape, window_shape, strides, dilations))

    def build_traverser(self) -> Traverser:
        return Traverser(self.weighted_shape, self.dtype)
