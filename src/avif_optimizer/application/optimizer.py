"""Image optimization orchestrator: discovery, batch conversion, summary."""

from functools import partial
from typing import Callable, List, Optional, Sequence, Tuple
from pathlib import Path

from avif_optimizer.domain.models import ConcurrencyConfig, OptimizationSummary
from avif_optimizer.domain.protocols import IConverter, IBatchObserver
from avif_optimizer.domain.exceptions import NoImagesFoundError
from avif_optimizer.application.observers import LoggingObserver
from avif_optimizer.application.scheduler import BatchScheduler
from avif_optimizer.application.sizing import recommend_concurrency
from avif_optimizer.application.task_runner import in_thread, with_timeout
from avif_optimizer.infrastructure.config.loader import OptimizerConfig
from avif_optimizer.infrastructure.media.discovery import find_image_files, apply_exclusions
from avif_optimizer.shared.logging import get_logger
from avif_optimizer.shared.metrics import MetricsCollector
from avif_optimizer.shared.retry import RetryStrategy, with_retries
from avif_optimizer.shared.types import PathLike

logger = get_logger(__name__)

MIB = 1024 * 1024

Discovery = Callable[[PathLike, bool], List[Path]]


class ImageOptimizer:
    """Coordinates discovery, the batch scheduler and the converter."""

    def __init__(
        self,
        converter: IConverter,
        scheduler: Optional[BatchScheduler] = None,
        metrics: Optional[MetricsCollector] = None,
        observers: Sequence[IBatchObserver] = (),
        discover: Discovery = find_image_files
    ):
        self._converter = converter
        self._scheduler = scheduler or BatchScheduler()
        self._metrics = metrics or MetricsCollector()
        self._observers = list(observers) or [LoggingObserver(logger)]
        self._discover = discover

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    def collect_files(self, input_pattern: PathLike, config: OptimizerConfig) -> Tuple[List[Path], int]:
        """
        Discover and filter the files for a run.

        Raises:
            NoImagesFoundError: If nothing is left to process
        """
        with self._metrics.timed('discovery'):
            files = self._discover(input_pattern, config.recursive)
            files, excluded = apply_exclusions(files, config.exclude)

        if excluded:
            logger.info(f"Excluded {excluded} file(s) based on patterns")
        if not files:
            raise NoImagesFoundError(f"No supported image files found matching {input_pattern}")
        return files, excluded

    def resolve_concurrency(self, file_count: int, config: OptimizerConfig) -> int:
        if config.concurrency is not None:
            return self._scheduler.resolve_concurrency(config.concurrency)
        memory_per_item = config.memory_per_item_mb * MIB if config.memory_per_item_mb else None
        return recommend_concurrency(
            file_count,
            memory_per_item=memory_per_item,
            parallelism=self._scheduler.parallelism,
        )

    def build_operation(self, config: OptimizerConfig):
        """Per-file operation: convert (or analyze), with optional retries and timeout."""
        work = self._converter.analyze if config.dry_run else self._converter.convert
        op = in_thread(partial(_call_with_config, work, config))
        if config.retries > 0:
            op = with_retries(op, RetryStrategy(max_attempts=config.retries + 1, backoff_seconds=0.5))
        if config.timeout_seconds:
            op = with_timeout(op, config.timeout_seconds)
        return op

    async def optimize(self, input_pattern: PathLike, config: OptimizerConfig) -> OptimizationSummary:
        """
        Convert every supported image matching ``input_pattern``.

        Per-file failures end up in ``OptimizationSummary.errors``; they do
        not abort the run.

        Raises:
            NoImagesFoundError: If no supported files are found
        """
        with self._metrics.timed('total'):
            files, excluded = self.collect_files(input_pattern, config)
            concurrency = self.resolve_concurrency(len(files), config)
            logger.info(f"Found {len(files)} image file(s), processing with {concurrency} worker(s)")

            with self._metrics.timed('batch'):
                batch = await self._scheduler.run(
                    files,
                    self.build_operation(config),
                    ConcurrencyConfig(concurrency=concurrency, observers=self._observers),
                )

        converted = [r for r in batch.results if not r.skipped]
        skipped = len(batch.results) - len(converted)
        self._metrics.increment_counter('converted', len(converted))
        self._metrics.increment_counter('skipped', skipped)
        self._metrics.increment_counter('failed', batch.failed)

        return OptimizationSummary(
            results=converted,
            errors=batch.errors,
            dry_run=config.dry_run,
            skipped=skipped,
            excluded=excluded,
            concurrency=concurrency,
            total_batch_time=self._metrics.get_metric('total_ms')[-1],
        )


def _call_with_config(work, config, path):
    return work(path, config)
