"""
Name-keyed operation registries (a.k.a. "static registration tables").

This module provides a small mechanism for registering a family of
operations (e.g. elementwise binary ops, reductions) under string names and
resolving them at call time.

Core idea
---------
- You create one registry per family:

      binary_ops = OpRegistry("binary")

- Implementations register themselves with a decorator, optionally
  attaching metadata consumed by the generic executor:

      @binary_ops.register("add", result="merge")
      def _add(a, b):
          return a + b

- Generic code resolves the entry by name and runs it:

      entry = binary_ops.get("add")
      entry.fn(1, 2), entry.meta["result"]

Important notes
---------------
- Registration happens once at import time of the defining module; the
  registry is never mutated afterwards, so lookups are safe from any thread.
- Re-registering a name replaces the previous entry. This is intentional so
  that callers can override a built-in with a specialized implementation.
- Unknown names raise `UnknownOperationError` rather than returning None.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, Mapping, NamedTuple

from typing_extensions import ParamSpec, TypeVar

from .._errors import UnknownOperationError

P = ParamSpec("P")
R = TypeVar("R")


class OpEntry(NamedTuple):
    """
    A registered operation.

    Fields
    ------
    name : str
        Public name the operation is registered under.
    fn : Callable
        The implementation.
    meta : Mapping[str, Any]
        Free-form metadata supplied at registration (result type rule,
        identity value, ...).
    """

    name: str
    fn: Callable[..., Any]
    meta: Mapping[str, Any]


class OpRegistry:
    """
    Mapping from operation names to implementations for one op family.

    Parameters
    ----------
    family : str
        Human-readable family name used in error messages
        (e.g. ``"binary"``, ``"reduction"``).
    """

    def __init__(self, family: str) -> None:
        self.family = family
        self._entries: Dict[str, OpEntry] = {}

    def register(
        self, name: str, **meta: Any
    ) -> Callable[[Callable[P, R]], Callable[P, R]]:
        """
        Build a decorator that registers an implementation under ``name``.

        Parameters
        ----------
        name : str
            Name to register under.
        **meta : Any
            Metadata stored alongside the implementation.

        Returns
        -------
        Callable[[Callable[P, R]], Callable[P, R]]
            A decorator returning the implementation unchanged, so registered
            functions remain directly callable.
        """

        def decorator(fn: Callable[P, R]) -> Callable[P, R]:
            self._entries[name] = OpEntry(name=name, fn=fn, meta=dict(meta))
            return fn

        return decorator

    def add(self, name: str, fn: Callable[..., Any], **meta: Any) -> None:
        """Register ``fn`` under ``name`` without the decorator syntax."""
        self._entries[name] = OpEntry(name=name, fn=fn, meta=dict(meta))

    def get(self, name: str) -> OpEntry:
        """
        Resolve ``name`` to its registered entry.

        Raises
        ------
        UnknownOperationError
            If nothing is registered under ``name``.
        """
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownOperationError(self.family, name) from None

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._entries))

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._entries)
