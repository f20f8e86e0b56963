"""
Runtime configuration for keybin, read from environment variables.

Variables
---------
- ``KEYBIN_WORKERS`` (int, default 1)
    Number of worker threads an operation may use to materialize disjoint
    chunks of its output. ``1`` keeps every operation on the calling thread.
- ``KEYBIN_PARALLEL_THRESHOLD`` (int, default 65536)
    Minimum number of output elements before work is partitioned.

The configuration is resolved once and cached. Call `reload_config()` after
changing the environment (tests do this).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


def _env_int(name: str, default: int, minimum: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class EngineConfig:
    """
    Resolved engine settings.

    Attributes
    ----------
    workers : int
        Worker threads available for output partitioning.
    parallel_threshold : int
        Output element count at which partitioning kicks in.
    """

    workers: int = 1
    parallel_threshold: int = 65536

    @classmethod
    def from_env(cls) -> "EngineConfig":
        return cls(
            workers=_env_int("KEYBIN_WORKERS", 1, minimum=1),
            parallel_threshold=_env_int("KEYBIN_PARALLEL_THRESHOLD", 65536, minimum=1),
        )


@lru_cache(maxsize=1)
def get_config() -> EngineConfig:
    """Return the cached configuration, reading the environment on first use."""
    return EngineConfig.from_env()


def reload_config() -> EngineConfig:
    """Discard the cached configuration and read the environment again."""
    get_config.cache_clear()
    return get_config()
