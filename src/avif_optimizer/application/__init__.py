"""Application layer package."""

from avif_optimizer.application.task_runner import run_task, with_timeout, in_thread
from avif_optimizer.application.scheduler import BatchScheduler, run_batch
from avif_optimizer.application.sizing import recommend_concurrency
from avif_optimizer.application.observers import (
    CallbackObserver,
    CompositeObserver,
    LoggingObserver,
    build_observer,
)
from avif_optimizer.application.batch_processor import BatchProcessor, chunk
from avif_optimizer.application.optimizer import ImageOptimizer

__all__ = [
    "run_task",
    "with_timeout",
    "in_thread",
    "BatchScheduler",
    "run_batch",
    "recommend_concurrency",
    "CallbackObserver",
    "CompositeObserver",
    "LoggingObserver",
    "build_observer",
    "BatchProcessor",
    "chunk",
    "ImageOptimizer",
]
