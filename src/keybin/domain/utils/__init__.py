from ._registry import OpEntry, OpRegistry

__all__ = [OpEntry.__name__, OpRegistry.__name__]
