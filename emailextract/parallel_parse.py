"""Helpers for processing many in-memory files concurrently."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Iterator, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def parallel_map(
    items: Iterable[T], worker: Callable[[T], R], max_workers: int = 1
) -> Iterator[R]:
    """Apply ``worker`` to each item, yielding results in input order.

    With ``max_workers <= 1`` items are processed one by one without a pool.
    At most ``2 * max_workers`` items are in flight, so lazily produced inputs
    (file contents) are not all held in memory at once. An exception raised
    by ``worker`` cancels pending work and propagates to the caller; workers
    are expected to turn per-item failures into results themselves.
    """

    if max_workers <= 1:
        for item in items:
            yield worker(item)
        return

    executor = ThreadPoolExecutor(max_workers=max_workers)
    pending = []
    try:
        for item in items:
            pending.append(executor.submit(worker, item))
            if len(pending) >= 2 * max_workers:
                yield pending.pop(0).result()
        while pending:
            yield pending.pop(0).result()
    finally:
        executor.shutdown(wait=True, cancel_futures=True)
