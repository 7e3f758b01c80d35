"""Shared utilities package."""

from avif_optimizer.shared.logging import setup_logger, get_logger, OutputSettings
from avif_optimizer.shared.retry import RetryStrategy, with_retries
from avif_optimizer.shared.metrics import MetricsCollector
from avif_optimizer.shared.types import PathLike, ItemOperation

__all__ = [
    "setup_logger",
    "get_logger",
    "OutputSettings",
    "RetryStrategy",
    "with_retries",
    "MetricsCollector",
    "PathLike",
    "ItemOperation",
]
