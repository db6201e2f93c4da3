# orchestration/bounded_executor.py
"""Run many independent async jobs under a fixed concurrency ceiling."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Generic, TypeVar

import structlog

from core.errors import ConfigurationError

logger = structlog.get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

JobFn = Callable[[T], Awaitable[R]]
# Return value (or awaited value) fills the failed slot
ErrorHandler = Callable[[T, Exception], Any]


def log_and_return_none(item: Any, error: Exception) -> None:
    """Default error handler: log the failure and leave the slot empty."""
    logger.error(
        "Error processing item",
        item=repr(item)[:200],
        error=str(error),
        exc_info=error,
    )
    return None


class BoundedExecutor(Generic[T, R]):
    """Execute ``job_fn`` over items with at most ``concurrency`` in flight.

    A slot is released as soon as a job finishes, so the next pending item
    starts immediately. A failing job never affects its siblings: the error
    goes to ``on_error`` and its return value fills that item's slot.
    Results come back in input order.
    """

    def __init__(
        self,
        concurrency: int,
        on_error: ErrorHandler[T] = log_and_return_none,
    ) -> None:
        if concurrency < 1:
            raise ConfigurationError(
                f"concurrency must be at least 1, got {concurrency}"
            )
        self.concurrency = concurrency
        self.on_error = on_error

    async def execute_all(
        self, items: Sequence[T], job_fn: JobFn[T, R]
    ) -> list[R | None]:
        if not items:
            return []

        semaphore = asyncio.Semaphore(self.concurrency)
        logger.debug(
            "Starting batch", items=len(items), concurrency=self.concurrency
        )

        async def _run_one(index: int, item: T) -> R | None:
            async with semaphore:
                try:
                    return await job_fn(item)
                except Exception as exc:
                    logger.debug("Batch item failed", index=index, error=str(exc))
                    handled = self.on_error(item, exc)
                    if inspect.isawaitable(handled):
                        handled = await handled
                    return handled

        tasks = [
            asyncio.ensure_future(_run_one(index, item))
            for index, item in enumerate(items)
        ]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            # A raising handler or an outer cancellation ends the batch;
            # nothing may keep running once the call has returned.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        logger.debug("Batch settled", items=len(items))
        return list(results)


async def execute_all(
    items: Sequence[T],
    concurrency: int,
    job_fn: JobFn[T, R],
    on_error: ErrorHandler[T] = log_and_return_none,
) -> list[R | None]:
    """Convenience wrapper building a one-off ``BoundedExecutor``."""
    return await BoundedExecutor(concurrency, on_error).execute_all(items, job_fn)
