"""Reusable batch processor and sequence chunking."""

from typing import Any, Dict, List, Optional, Sequence

from avif_optimizer.domain.models import (
    BatchResult, ConcurrencyConfig, ProgressCallback, ErrorCallback
)
from avif_optimizer.domain.protocols import IParallelismProvider
from avif_optimizer.application.observers import LoggingObserver
from avif_optimizer.application.scheduler import BatchScheduler
from avif_optimizer.shared.logging import get_logger
from avif_optimizer.shared.types import ItemOperation

logger = get_logger(__name__)

DEFAULT_CONCURRENCY = 4


class BatchProcessor:
    """
    Batch scheduler bound to a persistent configuration.

    Usage:
        processor = BatchProcessor(concurrency=2)
        result = await processor.process(files, convert)
        print(result.items_per_second)
    """

    def __init__(
        self,
        concurrency: int = DEFAULT_CONCURRENCY,
        show_progress: bool = True,
        parallelism: Optional[IParallelismProvider] = None
    ):
        self._scheduler = BatchScheduler(parallelism)
        self._config: Dict[str, Any] = {
            'concurrency': self._scheduler.resolve_concurrency(concurrency),
            'show_progress': show_progress,
        }

    def get_config(self) -> Dict[str, Any]:
        """Return a copy of the current configuration."""
        return dict(self._config)

    def set_concurrency(self, concurrency: int) -> int:
        """Set the slot count, clamped into ``[1, cpu_count]``; returns the value used."""
        self._config['concurrency'] = self._scheduler.resolve_concurrency(concurrency)
        return self._config['concurrency']

    async def process(
        self,
        items: Sequence[Any],
        op: ItemOperation,
        on_progress: Optional[ProgressCallback] = None,
        on_error: Optional[ErrorCallback] = None
    ) -> BatchResult:
        """Run ``items`` through ``op`` with the configured concurrency."""
        observers = [LoggingObserver(logger)] if self._config['show_progress'] else []
        config = ConcurrencyConfig(
            concurrency=self._config['concurrency'],
            on_progress=on_progress,
            on_error=on_error,
            observers=observers,
        )
        result = await self._scheduler.run(items, op, config)
        logger.debug(
            f"Processed {result.total} items: {result.average_time_per_item:.1f}ms/item, "
            f"{result.items_per_second:.2f} items/s"
        )
        return result


def chunk(sequence: Sequence[Any], size: int) -> List[List[Any]]:
    """
    Split ``sequence`` into consecutive groups of ``size`` items.

    The last group holds the remainder; an empty sequence yields no groups.
    """
    if size < 1:
        raise ValueError(f"Chunk size must be at least 1, got {size}")
    items = list(sequence)
    return [items[i:i + size] for i in range(0, len(items), size)]
