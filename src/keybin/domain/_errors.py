"""
Engine-level exceptions for keybin.

This module defines the errors raised when a caller hands the engine an
input that violates its preconditions. The engine assumes shapes and types
have already been validated by the surrounding array library, so these
exceptions signal a defect in that validation rather than a recoverable
runtime condition.

Each error derives from the closest built-in exception so callers can keep
catching `TypeError` / `ValueError` / `IndexError` where they already do.
"""

from __future__ import annotations

from typing import Any, Optional


class UnsupportedTypeError(TypeError):
    """
    Raised when a scalar type descriptor is not recognized.

    Attributes
    ----------
    dtype : Any
        The offending type descriptor (or NumPy dtype for interop).
    hint : str
        Optional extra context appended to the message.
    """

    def __init__(self, dtype: Any, hint: str = "") -> None:
        msg = f"Unsupported scalar type {dtype!r}"
        if hint:
            msg = f"{msg} {hint}"
        super().__init__(msg)
        self.dtype = dtype
        self.hint = hint


class ShapeMismatchError(ValueError):
    """
    Raised when a shape disagrees with the data it is supposed to describe.

    Typical causes are a buffer whose byte length is not
    ``element_count(shape) * byte_width(type)``, a reshape that changes the
    element count, or contracted axes with different extents.

    Attributes
    ----------
    expected : Any
        What the engine expected (a shape, a size, a byte count).
    actual : Any
        What it received.
    """

    def __init__(self, message: str, expected: Any = None, actual: Any = None) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class IndexOutOfRangeError(IndexError):
    """
    Raised when a traversal would read outside of a buffer.

    Attributes
    ----------
    offset : int
        The first out-of-range element offset that would be read.
    limit : int
        Number of elements available in the buffer.
    """

    def __init__(self, offset: int, limit: int, context: Optional[str] = None) -> None:
        msg = f"Offset {offset} is outside of buffer with {limit} elements"
        if context:
            msg = f"{context}: {msg}"
        super().__init__(msg)
        self.offset = offset
        self.limit = limit


class UnknownOperationError(KeyError):
    """
    Raised when an operation name has no registered implementation.
    """

    def __init__(self, family: str, name: str) -> None:
        super().__init__(f"No {family} operation registered under {name!r}")
        self.family = family
        self.name = name
