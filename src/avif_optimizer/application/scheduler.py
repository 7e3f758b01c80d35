"""Bounded-concurrency batch scheduler."""

import asyncio
import time
from typing import Any, List, Optional, Sequence

from avif_optimizer.domain.models import (
    WorkItem, TaskOutcome, ProgressEvent, ErrorEvent, BatchResult, ConcurrencyConfig
)
from avif_optimizer.domain.protocols import IParallelismProvider, IBatchObserver
from avif_optimizer.domain.exceptions import SchedulerInvariantError
from avif_optimizer.application.observers import build_observer
from avif_optimizer.application.task_runner import run_task
from avif_optimizer.infrastructure.system import SystemResources
from avif_optimizer.shared.logging import get_logger
from avif_optimizer.shared.types import ItemOperation

logger = get_logger(__name__)


class BatchScheduler:
    """
    Runs a list of items through a per-item operation with at most N in flight.

    The pool refills continuously: each slot pulls the next pending item as
    soon as its current item settles, so a slow item only ever holds its own
    slot. Per-item failures are captured as values and never abort the batch.
    """

    def __init__(self, parallelism: Optional[IParallelismProvider] = None):
        self._parallelism = parallelism or SystemResources()

    @property
    def parallelism(self) -> IParallelismProvider:
        return self._parallelism

    def resolve_concurrency(self, requested: Optional[int] = None) -> int:
        """
        Clamp a requested slot count into ``[1, cpu_count]``.

        ``None`` resolves to the host CPU count.
        """
        ceiling = max(1, self._parallelism.cpu_count())
        value = ceiling if requested is None else int(requested)
        return max(1, min(value, ceiling))

    async def run(
        self,
        items: Sequence[Any],
        op: ItemOperation,
        config: Optional[ConcurrencyConfig] = None
    ) -> BatchResult:
        """
        Run every item through ``op`` and return the aggregated result.

        ``BatchResult.results`` is ordered by input index, not by completion,
        and excludes failures. ``BatchResult.errors`` is ordered by completion
        and each entry carries the input ``index`` it belongs to. Progress and
        error observers are notified in completion order with a shared,
        monotonic ``completed`` counter.

        Args:
            items: Ordered input items (e.g. file paths)
            op: Sync or async callable invoked once per item
            config: Concurrency limit and observers

        Returns:
            BatchResult once every item has settled

        Raises:
            SchedulerInvariantError: If the scheduler's own bookkeeping breaks
        """
        config = config or ConcurrencyConfig()
        items = list(items)

        if not items:
            return BatchResult.empty()

        limit = self.resolve_concurrency(config.concurrency)
        logger.debug(f"Starting batch of {len(items)} items with {limit} slots")

        batch = _BatchRun(items, op, limit, build_observer(config))
        result = await batch.execute()

        logger.info(
            f"Batch finished: {result.successful}/{result.total} succeeded, "
            f"{result.failed} failed in {result.duration_ms:.1f}ms"
        )
        return result


class _BatchRun:
    """Mutable state of one scheduler invocation."""

    def __init__(self, items: List[Any], op: ItemOperation, limit: int, observer: IBatchObserver):
        self.total = len(items)
        self.limit = limit
        self.completed = 0
        self.in_flight = 0
        self.peak_in_flight = 0
        self._op = op
        self._observer = observer
        self._pending = iter([WorkItem(index=i, item=item) for i, item in enumerate(items)])
        self._outcomes: List[Optional[TaskOutcome]] = [None] * self.total
        self._errors: List[ErrorEvent] = []

    async def execute(self) -> BatchResult:
        start = time.perf_counter()
        slots = [
            asyncio.ensure_future(self._slot())
            for _ in range(min(self.limit, self.total))
        ]
        try:
            await asyncio.gather(*slots)
        except BaseException:
            for slot in slots:
                slot.cancel()
            raise
        return self._assemble((time.perf_counter() - start) * 1000)

    async def _slot(self) -> None:
        # The shared iterator is only advanced between awaits, so two slots
        # never receive the same item.
        for work_item in self._pending:
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
            if self.in_flight > self.limit:
                raise SchedulerInvariantError(
                    f"{self.in_flight} items in flight, limit is {self.limit}"
                )
            try:
                outcome = await run_task(work_item, self._op)
            finally:
                self.in_flight -= 1
            self._settle(outcome)

    def _settle(self, outcome: TaskOutcome) -> None:
        if self._outcomes[outcome.index] is not None:
            raise SchedulerInvariantError(f"Item #{outcome.index} settled twice")

        self._outcomes[outcome.index] = outcome
        self.completed += 1

        if outcome.succeeded:
            self._observer.on_progress(ProgressEvent(
                item=outcome.item,
                index=outcome.index,
                completed=self.completed,
                total=self.total,
                result=outcome.value,
                percentage=self.completed / self.total * 100,
            ))
        else:
            event = ErrorEvent(
                item=outcome.item,
                index=outcome.index,
                error=outcome.error,
                completed=self.completed,
                total=self.total,
            )
            self._errors.append(event)
            self._observer.on_error(event)

    def _assemble(self, duration_ms: float) -> BatchResult:
        if self.completed != self.total or any(o is None for o in self._outcomes):
            raise SchedulerInvariantError(
                f"Batch ended with {self.completed} of {self.total} items settled"
            )

        outcomes = list(self._outcomes)
        results = [o.value for o in outcomes if o.succeeded]

        if len(results) + len(self._errors) != self.total:
            raise SchedulerInvariantError(
                f"{len(results)} successes and {len(self._errors)} failures "
                f"do not add up to {self.total} items"
            )

        return BatchResult(
            results=results,
            errors=list(self._errors),
            total=self.total,
            successful=len(results),
            failed=len(self._errors),
            duration_ms=duration_ms,
            outcomes=outcomes,
        )


async def run_batch(
    items: Sequence[Any],
    op: ItemOperation,
    config: Optional[ConcurrencyConfig] = None,
    parallelism: Optional[IParallelismProvider] = None
) -> BatchResult:
    """Run ``items`` through ``op`` with bounded concurrency. See ``BatchScheduler.run``."""
    return await BatchScheduler(parallelism).run(items, op, config)
