"""Configuration package."""

from avif_optimizer.infrastructure.config.loader import ConfigLoader, OptimizerConfig

__all__ = ["ConfigLoader", "OptimizerConfig"]
