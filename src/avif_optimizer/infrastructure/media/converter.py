"""AVIF conversion backed by Pillow (HEIC/HEIF input via pillow-heif)."""

import errno
import math
import time
from pathlib import Path
from typing import Any, Dict

from PIL import Image, UnidentifiedImageError, features
from pillow_heif import register_heif_opener

from avif_optimizer.domain.models import ConversionResult, Dimensions
from avif_optimizer.domain.exceptions import ConversionError
from avif_optimizer.infrastructure.config.loader import OptimizerConfig
from avif_optimizer.shared.logging import get_logger
from avif_optimizer.shared.types import PathLike

logger = get_logger(__name__)

register_heif_opener()

# Dry-run estimate: AVIF output relative to the (resized) source size
ESTIMATED_COMPRESSION_RATIO = 0.6
CHROMA_SUBSAMPLING = '4:2:0'


def avif_supported() -> bool:
    """Whether the installed Pillow build can encode AVIF."""
    return bool(features.check('avif'))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def optimized_dimensions(width: int, height: int, max_width: int, max_height: int) -> Dimensions:
    """
    Fit ``width`` x ``height`` inside the maximum box, keeping the aspect ratio.

    Images already inside the box are returned unchanged; nothing is upscaled.
    """
    if width <= max_width and height <= max_height:
        return Dimensions(width, height)

    aspect_ratio = width / height

    if width > height:
        new_width = min(width, max_width)
        new_height = _round_half_up(new_width / aspect_ratio)
    else:
        new_height = min(height, max_height)
        new_width = _round_half_up(new_height * aspect_ratio)

    if new_width > max_width:
        new_width = max_width
        new_height = _round_half_up(new_width / aspect_ratio)

    if new_height > max_height:
        new_height = max_height
        new_width = _round_half_up(new_height * aspect_ratio)

    return Dimensions(max(1, new_width), max(1, new_height))


def size_savings(original_size: int, output_size: int) -> float:
    """Percentage saved, rounded to one decimal."""
    if original_size <= 0:
        return 0.0
    return round((original_size - output_size) / original_size * 100, 1)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class AvifConverter:
    """Converts single images to AVIF. Implements the IConverter protocol."""

    def output_path_for(self, input_path: Path, config: OptimizerConfig) -> Path:
        output_dir = Path(config.output_dir) if config.output_dir else input_path.parent
        return output_dir / f"{input_path.stem}.avif"

    def convert(self, path: PathLike, config: OptimizerConfig) -> ConversionResult:
        """
        Convert one image to AVIF.

        Raises:
            ConversionError: If the image cannot be read, encoded or written
        """
        input_path = Path(path)
        start = time.perf_counter()
        output_path = self.output_path_for(input_path, config)

        if output_path.exists() and not config.force:
            logger.info(f"Skipping {input_path.name}: output already exists")
            return ConversionResult(input_path=input_path, output_path=output_path, skipped=True)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)

            metadata_start = time.perf_counter()
            with Image.open(input_path) as img:
                original = Dimensions(*img.size)
                metadata_time = _elapsed_ms(metadata_start)
                original_size = input_path.stat().st_size

                logger.debug(f"Processing: {input_path}")
                logger.debug(f"Original dimensions: {original.width}x{original.height}")

                target = optimized_dimensions(
                    original.width, original.height, config.max_width, config.max_height
                )
                logger.debug(f"Optimized dimensions: {target.width}x{target.height}")

                conversion_start = time.perf_counter()
                frame = self._prepare_frame(img, target)
                frame.save(output_path, format='AVIF', **self._save_options(img, config))
                conversion_time = _elapsed_ms(conversion_start)

            output_size = output_path.stat().st_size

            if not config.preserve_original:
                input_path.unlink()
                logger.debug(f"Removed original {input_path}")

        except Exception as e:
            raise self._conversion_error(input_path, 'converting', e) from e

        return ConversionResult(
            input_path=input_path,
            output_path=output_path,
            original_size=original_size,
            output_size=output_size,
            size_savings=size_savings(original_size, output_size),
            original_width=original.width,
            original_height=original.height,
            new_width=target.width,
            new_height=target.height,
            resized=original != target,
            preserve_exif=config.preserve_exif,
            processing_time=_elapsed_ms(start),
            metadata_time=metadata_time,
            conversion_time=conversion_time,
        )

    def analyze(self, path: PathLike, config: OptimizerConfig) -> ConversionResult:
        """
        Estimate the conversion of one image without writing anything.

        Raises:
            ConversionError: If the image cannot be read
        """
        input_path = Path(path)
        start = time.perf_counter()

        try:
            metadata_start = time.perf_counter()
            with Image.open(input_path) as img:
                original = Dimensions(*img.size)
            metadata_time = _elapsed_ms(metadata_start)
            original_size = input_path.stat().st_size
        except Exception as e:
            raise self._conversion_error(input_path, 'analyzing', e) from e

        target = optimized_dimensions(
            original.width, original.height, config.max_width, config.max_height
        )
        pixel_ratio = (target.width * target.height) / (original.width * original.height)
        estimated_size = _round_half_up(original_size * pixel_ratio * ESTIMATED_COMPRESSION_RATIO)

        return ConversionResult(
            input_path=input_path,
            output_path=self.output_path_for(input_path, config),
            original_size=original_size,
            output_size=estimated_size,
            size_savings=size_savings(original_size, estimated_size),
            original_width=original.width,
            original_height=original.height,
            new_width=target.width,
            new_height=target.height,
            resized=original != target,
            preserve_exif=config.preserve_exif,
            dry_run=True,
            processing_time=_elapsed_ms(start),
            metadata_time=metadata_time,
        )

    @staticmethod
    def _prepare_frame(img: Image.Image, target: Dimensions) -> Image.Image:
        has_alpha = img.mode in ('RGBA', 'LA', 'PA') or 'transparency' in img.info
        mode = 'RGBA' if has_alpha else 'RGB'
        frame = img if img.mode == mode else img.convert(mode)
        if frame.size != (target.width, target.height):
            frame = frame.resize((target.width, target.height), Image.Resampling.LANCZOS)
        return frame

    @staticmethod
    def _save_options(img: Image.Image, config: OptimizerConfig) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            'quality': config.quality,
            # effort 1..10 maps onto encoder speed 9..0
            'speed': 10 - config.effort,
            'subsampling': CHROMA_SUBSAMPLING,
        }
        if config.preserve_exif:
            exif = img.info.get('exif')
            if exif:
                options['exif'] = exif
            icc_profile = img.info.get('icc_profile')
            if icc_profile:
                options['icc_profile'] = icc_profile
        return options

    @staticmethod
    def _conversion_error(path: Path, action: str, error: Exception) -> ConversionError:
        if isinstance(error, FileNotFoundError):
            hint = "The file was not found or was deleted during processing"
        elif isinstance(error, PermissionError):
            hint = "Permission denied - check file/directory permissions"
        elif isinstance(error, OSError) and error.errno == errno.ENOSPC:
            hint = "No space left on device - free up disk space"
        elif isinstance(error, UnidentifiedImageError):
            hint = "The file format is not supported or the file is corrupted"
        else:
            hint = None
        return ConversionError(f"Error {action} {path}: {error}", path=str(path), hint=hint)
