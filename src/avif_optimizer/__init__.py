"""
AVIF Image Optimizer - programmatic API.

Fast, modern image optimizer that converts JPG, PNG and other formats to
AVIF with intelligent resizing and compression, converting many files in
parallel.

Usage:
    from avif_optimizer import optimize_to_avif

    summary = optimize_to_avif('./photos', quality=70, recursive=True)
    print(summary.processed, summary.total_savings)
"""

__version__ = "1.1.0"

import asyncio
from typing import Any, List, Sequence

from avif_optimizer.domain.models import (
    SUPPORTED_FORMATS, BatchResult, ConcurrencyConfig, ConversionResult, OptimizationSummary
)
from avif_optimizer.application.scheduler import BatchScheduler, run_batch
from avif_optimizer.application.sizing import recommend_concurrency
from avif_optimizer.application.batch_processor import BatchProcessor, chunk
from avif_optimizer.application.optimizer import ImageOptimizer
from avif_optimizer.infrastructure.config import OptimizerConfig
from avif_optimizer.infrastructure.media import AvifConverter
from avif_optimizer.shared.types import PathLike

DEFAULT_CONFIG = OptimizerConfig()


def convert_image_to_avif(path: PathLike, config: OptimizerConfig = DEFAULT_CONFIG) -> ConversionResult:
    """Convert a single image. Raises ``ConversionError`` on failure."""
    return AvifConverter().convert(path, config)


def optimize_to_avif(input_pattern: PathLike, **options: Any) -> OptimizationSummary:
    """
    Optimize a file, directory or glob pattern with default settings.

    Args:
        input_pattern: Input file, directory or glob pattern
        **options: ``OptimizerConfig`` field overrides
    """
    config = DEFAULT_CONFIG.replace(**options)
    return asyncio.run(ImageOptimizer(AvifConverter()).optimize(input_pattern, config))


def batch_convert(files: Sequence[PathLike], **options: Any) -> List[ConversionResult]:
    """
    Convert an explicit list of files.

    Returns the conversion results in input order; skipped and failed files
    are left out.
    """
    config = DEFAULT_CONFIG.replace(**options)
    converter = AvifConverter()

    async def convert_all() -> BatchResult:
        return await BatchScheduler().run(
            list(files),
            ImageOptimizer(converter).build_operation(config),
            ConcurrencyConfig(concurrency=config.concurrency or recommend_concurrency(len(files))),
        )

    result = asyncio.run(convert_all())
    return [r for r in result.results if not r.skipped]


__all__ = [
    "__version__",
    "DEFAULT_CONFIG",
    "SUPPORTED_FORMATS",
    "OptimizerConfig",
    "BatchResult",
    "ConcurrencyConfig",
    "BatchScheduler",
    "BatchProcessor",
    "run_batch",
    "recommend_concurrency",
    "chunk",
    "convert_image_to_avif",
    "optimize_to_avif",
    "batch_convert",
]
