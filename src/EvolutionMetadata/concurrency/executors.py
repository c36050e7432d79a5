"""Executor factory utilities used by the extraction scheduler."""

from __future__ import annotations

from concurrent import futures
from typing import Optional, Tuple

Executor = futures.Executor


def create_executor(
    task_count: int, max_workers: Optional[int] = None
) -> Tuple[Optional[Executor], bool]:
    """
    Return a thread pool sized for ``task_count`` IO-bound units of work.

    Args:
        task_count: Number of units the caller intends to submit.
        max_workers: Optional upper bound. ``None`` allocates one worker per
            unit, which is the unbounded fan-out the scheduler defaults to.

    Returns:
        Tuple of (executor, needs_shutdown). ``executor`` is ``None`` when the
        work is small enough to run inline on the calling thread. Caller is
        responsible for shutting down the returned executor when
        ``needs_shutdown`` is ``True``.
    """
    workers = task_count if max_workers is None else min(task_count, max_workers)
    if workers <= 1:
        return None, False
    return (
        futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix="evometa-extract"),
        True,
    )
