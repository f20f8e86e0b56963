"""
Output partitioning for element-independent operations.

Every output element of an engine operation depends only on the (shared,
immutable) inputs, never on another output element. An operation can
therefore split its output index space into disjoint ``[start, stop)``
ranges, materialize each range on a worker thread and join the parts in
order. No locking is needed.

Whether work is split is controlled by `EngineConfig.workers` and
`EngineConfig.parallel_threshold`.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Tuple

from .._config import get_config

logger = logging.getLogger(__name__)

ChunkFn = Callable[[int, int], bytes]


def partition(count: int, parts: int) -> List[Tuple[int, int]]:
    """
    Split ``range(count)`` into at most ``parts`` contiguous, near-equal
    ranges.
    """
    parts = max(1, min(parts, count))
    base, extra = divmod(count, parts)
    ranges = []
    start = 0
    for p in range(parts):
        stop = start + base + (1 if p < extra else 0)
        ranges.append((start, stop))
        start = stop
    return ranges


def materialize(count: int, chunk: ChunkFn) -> bytes:
    """
    Produce the output buffer for ``count`` elements.

    Parameters
    ----------
    count : int
        Number of output elements.
    chunk : Callable[[int, int], bytes]
        Returns the encoded output elements of positions ``[start, stop)``.

    Returns
    -------
    bytes
        ``chunk(0, count)``, possibly assembled from several worker threads.
    """
    config = get_config()
    if config.workers <= 1 or count < config.parallel_threshold:
        return chunk(0, count)

    ranges = partition(count, config.workers)
    logger.debug(
        "Materializing %d elements in %d chunks on %d workers",
        count,
        len(ranges),
        config.workers,
    )
    with ThreadPoolExecutor(max_workers=config.workers) as pool:
        parts = list(pool.map(lambda r: chunk(r[0], r[1]), ranges))
    return b"".join(parts)
