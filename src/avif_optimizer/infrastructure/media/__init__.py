"""Media package: image discovery and AVIF conversion."""

from avif_optimizer.infrastructure.media.converter import (
    AvifConverter,
    avif_supported,
    optimized_dimensions,
)
from avif_optimizer.infrastructure.media.discovery import (
    find_image_files,
    apply_exclusions,
    expand_braces,
    is_supported,
)

__all__ = [
    "AvifConverter",
    "avif_supported",
    "optimized_dimensions",
    "find_image_files",
    "apply_exclusions",
    "expand_braces",
    "is_supported",
]
