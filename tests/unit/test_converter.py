"""
Unit tests for the AVIF converter.
"""

from pathlib import Path

import pytest
from PIL import Image

from avif_optimizer.domain.exceptions import ConversionError
from avif_optimizer.domain.models import Dimensions
from avif_optimizer.infrastructure.config import OptimizerConfig
from avif_optimizer.infrastructure.media.converter import (
    AvifConverter, avif_supported, optimized_dimensions, size_savings
)

requires_avif = pytest.mark.skipif(not avif_supported(), reason="Pillow built without AVIF support")


def make_image(path: Path, size=(400, 300), mode='RGB') -> Path:
    Image.new(mode, size, color=(200, 100, 50, 255)[:len(mode)]).save(path)
    return path


def make_transparent_image(path: Path, size=(64, 64)) -> Path:
    """Opaque square on a fully transparent canvas."""
    canvas = Image.new('RGBA', size, color=(0, 0, 0, 0))
    canvas.paste(Image.new('RGBA', (size[0] // 2, size[1] // 2), color=(200, 100, 50, 255)), (8, 8))
    canvas.save(path)
    return path


class TestOptimizedDimensions:
    """Test aspect-preserving resize bounds."""

    @pytest.mark.parametrize('size,box,expected', [
        ((800, 600), (1200, 1200), (800, 600)),
        ((4000, 3000), (1200, 1200), (1200, 900)),
        ((3000, 4000), (1200, 1200), (900, 1200)),
        ((2000, 2000), (1200, 800), (800, 800)),
        ((1000, 400), (1200, 200), (500, 200)),
        ((1201, 1), (1200, 1200), (1200, 1)),
    ])
    def test_fits_box(self, size, box, expected):
        assert optimized_dimensions(*size, *box) == Dimensions(*expected)

    def test_never_upscales(self):
        assert optimized_dimensions(10, 10, 1200, 1200) == Dimensions(10, 10)


class TestSizeSavings:

    def test_rounded_percentage(self):
        assert size_savings(3000, 1000) == 66.7

    def test_zero_original(self):
        assert size_savings(0, 100) == 0.0


class TestAnalyze:
    """Test dry-run analysis."""

    def test_estimate_without_resize(self, tmp_path):
        path = make_image(tmp_path / 'small.png')
        original_size = path.stat().st_size

        result = AvifConverter().analyze(path, OptimizerConfig())

        assert result.dry_run
        assert not result.resized
        assert result.output_size == int(original_size * 0.6 + 0.5)
        assert result.output_path == tmp_path / 'small.avif'
        assert not result.output_path.exists()

    def test_estimate_with_resize(self, tmp_path):
        path = make_image(tmp_path / 'large.png', size=(400, 200))

        result = AvifConverter().analyze(path, OptimizerConfig(max_width=100, max_height=100))

        assert result.resized
        assert (result.new_width, result.new_height) == (100, 50)
        assert result.output_size < result.original_size

    def test_output_dir(self, tmp_path):
        path = make_image(tmp_path / 'a.png')

        result = AvifConverter().analyze(path, OptimizerConfig(output_dir=tmp_path / 'out'))

        assert result.output_path == tmp_path / 'out' / 'a.avif'

    def test_unreadable_image(self, tmp_path):
        path = tmp_path / 'broken.jpg'
        path.write_bytes(b'not an image')

        with pytest.raises(ConversionError) as exc_info:
            AvifConverter().analyze(path, OptimizerConfig())

        assert exc_info.value.path == str(path)
        assert 'not supported or the file is corrupted' in exc_info.value.hint

    def test_missing_image(self, tmp_path):
        with pytest.raises(ConversionError) as exc_info:
            AvifConverter().analyze(tmp_path / 'gone.jpg', OptimizerConfig())

        assert 'not found' in exc_info.value.hint


class TestConvert:
    """Test conversion to AVIF."""

    def test_skips_existing_output(self, tmp_path):
        path = make_image(tmp_path / 'a.png')
        (tmp_path / 'a.avif').write_bytes(b'existing')

        result = AvifConverter().convert(path, OptimizerConfig())

        assert result.skipped
        assert (tmp_path / 'a.avif').read_bytes() == b'existing'

    def test_broken_input_raises(self, tmp_path):
        path = tmp_path / 'broken.png'
        path.write_bytes(b'garbage')

        with pytest.raises(ConversionError):
            AvifConverter().convert(path, OptimizerConfig())

    @requires_avif
    def test_converts_and_resizes(self, tmp_path):
        path = make_image(tmp_path / 'photo.jpg', size=(400, 200))

        result = AvifConverter().convert(path, OptimizerConfig(max_width=200, max_height=200))

        assert result.output_path == tmp_path / 'photo.avif'
        assert result.output_path.exists()
        assert result.resized
        assert result.output_size == result.output_path.stat().st_size
        assert path.exists()
        with Image.open(result.output_path) as img:
            assert img.size == (200, 100)

    @requires_avif
    def test_keeps_alpha(self, tmp_path):
        path = make_transparent_image(tmp_path / 'logo.png')

        result = AvifConverter().convert(path, OptimizerConfig(output_dir=tmp_path / 'out'))

        assert result.output_path == tmp_path / 'out' / 'logo.avif'
        with Image.open(result.output_path) as img:
            assert 'A' in img.getbands()

    @requires_avif
    def test_removes_original_when_not_preserved(self, tmp_path):
        path = make_image(tmp_path / 'photo.png')

        AvifConverter().convert(path, OptimizerConfig(preserve_original=False))

        assert not path.exists()
        assert (tmp_path / 'photo.avif').exists()

    @requires_avif
    def test_force_overwrites(self, tmp_path):
        path = make_image(tmp_path / 'a.png')
        (tmp_path / 'a.avif').write_bytes(b'existing')

        result = AvifConverter().convert(path, OptimizerConfig(force=True))

        assert not result.skipped
        assert (tmp_path / 'a.avif').read_bytes() != b'existing'
