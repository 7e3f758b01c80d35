"""Console rendering of optimizer progress and summaries."""

import json
import sys
from typing import Optional, Sequence, TextIO

from avif_optimizer.domain.models import (
    SUPPORTED_FORMATS, ProgressEvent, ErrorEvent, ConversionResult, OptimizationSummary
)
from avif_optimizer.infrastructure.config.loader import OptimizerConfig
from avif_optimizer.shared.logging import OutputSettings


def format_time(milliseconds: float) -> str:
    if milliseconds < 1000:
        return f"{milliseconds:.1f}ms"
    return f"{milliseconds / 1000:.2f}s"


def _kb(size: int) -> str:
    return f"{size / 1024:.1f}KB"


class ConsoleReporter:
    """
    Renders a run for humans (or as JSON) according to ``OutputSettings``.

    Also acts as a batch observer so per-file lines appear as files finish.
    """

    def __init__(
        self,
        settings: OutputSettings,
        stream: Optional[TextIO] = None,
        err_stream: Optional[TextIO] = None
    ):
        self.settings = settings
        self._out = stream or sys.stdout
        self._err = err_stream or sys.stderr

    def _normal(self, *lines: str) -> None:
        if self.settings.normal:
            for line in lines:
                print(line, file=self._out)

    def _always(self, *lines: str) -> None:
        if not self.settings.json:
            for line in lines:
                print(line, file=self._out)

    def banner(self, config: OptimizerConfig) -> None:
        self._normal(
            '🖼️  AVIF Image Optimizer',
            '========================',
            f"Supported formats: {', '.join(SUPPORTED_FORMATS)}",
            f"Max dimensions: {config.max_width}x{config.max_height}px",
            f"Quality: {config.quality}",
            f"Effort: {config.effort}",
        )
        if config.dry_run:
            self._normal('Mode: Dry run (no files will be written)')
        self._normal('')

    def on_progress(self, event: ProgressEvent) -> None:
        result: ConversionResult = event.result
        if result.skipped:
            self._normal(f"⚠️  Skipping {result.input_path.name}: output already exists")
            return

        marker = '🔎' if result.dry_run else '✅'
        metadata_info = ' with metadata' if result.preserve_exif else ''
        change_info = (
            f" ({result.original_width}x{result.original_height} → {result.new_width}x{result.new_height})"
            if result.resized else ''
        )
        label = 'Analysis time' if result.dry_run else 'Processing time'
        self._normal(
            f"{marker} {result.input_path.name} → {result.output_path.name}{metadata_info}",
            f"   Size: {_kb(result.original_size)} → {_kb(result.output_size)} "
            f"({result.size_savings}% savings){change_info}",
            f"   {label}: {format_time(result.processing_time)}",
        )
        if self.settings.verbose:
            self._normal(f"   [{event.completed}/{event.total}] {event.percentage:.1f}%")

    def on_error(self, event: ErrorEvent) -> None:
        print(f"❌ Error processing {event.item}", file=self._err)
        print(f"   Reason: {event.error}", file=self._err)
        hint = getattr(event.error, 'hint', None)
        if hint:
            print(f"   💡 {hint}", file=self._err)

    def summary(self, summary: OptimizationSummary) -> None:
        if self.settings.json:
            print(json.dumps(summary.to_dict(), indent=2), file=self._out)
            return

        if summary.processed == 0 and summary.skipped == 0 and summary.failed == 0:
            return

        verb = 'analyzed' if summary.dry_run else 'converted'
        self._always(
            '\n📊 Dry Run Summary' if summary.dry_run else '\n📊 Conversion Summary',
            '=====================',
            f"✅ Successfully {verb}: {summary.processed} files",
        )
        if summary.skipped:
            self._always(f"⏭️  Skipped: {summary.skipped} files")
        if summary.failed:
            self._always(f"❌ Failed: {summary.failed} files")
        self._always(f"📏 Resized images: {summary.resized} files")
        if summary.processed:
            self._always(
                f"💾 Total size savings: {_kb(summary.total_original_size)} → "
                f"{_kb(summary.total_output_size)} ({summary.total_savings}%)",
                f"⏱️  Total batch time: {format_time(summary.total_batch_time)}",
                f"⚡ Average time per file: {format_time(summary.average_processing_time)}",
            )

    def no_images(self, input_pattern: str) -> None:
        if self.settings.json:
            print(json.dumps({
                'error': 'No supported image files found',
                'input': input_pattern,
                'supportedFormats': list(SUPPORTED_FORMATS),
            }), file=self._out)
            return
        print('❌ No supported image files found matching the pattern', file=self._err)
        print(f"   Input: {input_pattern}", file=self._err)
        print(f"   Supported formats: {', '.join(SUPPORTED_FORMATS)}", file=self._err)
        self.suggestions([
            'Check if the path contains supported image files',
            'Use --recursive to search subdirectories',
            'Try a different file pattern or directory',
        ])

    def error(self, message: str, suggestions: Sequence[str] = ()) -> None:
        print(f"❌ Error: {message}", file=self._err)
        self.suggestions(suggestions)

    def suggestions(self, suggestions: Sequence[str]) -> None:
        if not suggestions:
            return
        print('\n   💡 Suggestions:', file=self._err)
        for suggestion in suggestions:
            print(f"   • {suggestion}", file=self._err)
