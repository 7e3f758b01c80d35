"""Presentation layer package."""

from avif_optimizer.presentation.cli import main, create_optimizer

__all__ = ["main", "create_optimizer"]
