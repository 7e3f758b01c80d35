"""Single work item execution with timing and failure capture."""

import asyncio
import inspect
import time
from functools import wraps
from typing import Any, Awaitable, Callable

from avif_optimizer.domain.models import WorkItem, TaskOutcome, TaskSuccess, TaskFailure
from avif_optimizer.domain.exceptions import TaskTimeoutError
from avif_optimizer.shared.types import ItemOperation


async def run_task(work_item: WorkItem, op: ItemOperation) -> TaskOutcome:
    """
    Run one work item through ``op`` and capture the outcome.

    ``op`` may be a plain callable or return an awaitable. An exception raised
    while calling it or while awaiting its result is turned into a
    ``TaskFailure``; it never propagates out of this function. Cancellation
    is not an item failure and is re-raised.

    Args:
        work_item: Item and its original index
        op: Per-item operation

    Returns:
        TaskSuccess or TaskFailure with the elapsed time in milliseconds
    """
    start = time.perf_counter()
    try:
        value = op(work_item.item)
        if inspect.isawaitable(value):
            value = await value
    except Exception as e:
        return TaskFailure(
            index=work_item.index,
            item=work_item.item,
            error=e,
            duration_ms=_elapsed_ms(start),
        )
    return TaskSuccess(
        index=work_item.index,
        item=work_item.item,
        value=value,
        duration_ms=_elapsed_ms(start),
    )


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def with_timeout(op: ItemOperation, seconds: float) -> Callable[[Any], Awaitable[Any]]:
    """
    Wrap ``op`` so an item taking longer than ``seconds`` fails.

    The item fails with ``TaskTimeoutError`` and its slot is released, so a
    hung operation cannot starve the rest of the batch. Work already running
    in a thread (see ``in_thread``) is abandoned, not interrupted.
    """
    if seconds <= 0:
        raise ValueError("timeout must be positive")

    @wraps(op)
    async def wrapper(item):
        async def call():
            result = op(item)
            if inspect.isawaitable(result):
                result = await result
            return result

        try:
            return await asyncio.wait_for(call(), timeout=seconds)
        except asyncio.TimeoutError:
            raise TaskTimeoutError(f"{item} timed out after {seconds}s") from None

    return wrapper


def in_thread(fn: Callable[[Any], Any]) -> Callable[[Any], Awaitable[Any]]:
    """Adapt a blocking callable into an async op executed in a worker thread."""

    @wraps(fn)
    async def wrapper(item):
        return await asyncio.to_thread(fn, item)

    return wrapper
