"""Domain models for batch image optimization."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, List, Callable, Union


SUPPORTED_FORMATS = ('.jpg', '.jpeg', '.png', '.webp', '.tiff', '.tif', '.heic', '.heif')


@dataclass(frozen=True)
class WorkItem:
    """One input element paired with its position in the original sequence."""

    index: int
    item: Any


@dataclass(frozen=True)
class TaskSuccess:
    """Outcome of a work item whose operation completed normally."""

    index: int
    item: Any
    value: Any
    duration_ms: float

    @property
    def succeeded(self) -> bool:
        return True


@dataclass(frozen=True)
class TaskFailure:
    """Outcome of a work item whose operation raised."""

    index: int
    item: Any
    error: BaseException
    duration_ms: float

    @property
    def succeeded(self) -> bool:
        return False


TaskOutcome = Union[TaskSuccess, TaskFailure]


@dataclass(frozen=True)
class ProgressEvent:
    """Payload delivered to progress observers for each successful item."""

    item: Any
    index: int
    completed: int
    total: int
    result: Any
    percentage: float


@dataclass(frozen=True)
class ErrorEvent:
    """Payload delivered to error observers for each failed item."""

    item: Any
    index: int
    error: BaseException
    completed: int
    total: int


@dataclass
class BatchResult:
    """
    Aggregate of all outcomes for one scheduler invocation.

    ``results`` holds success values in original input order, so callers can
    zip them back to the inputs they came from. ``errors`` holds failures in
    the order they occurred, each carrying the ``index`` of its input.
    """

    results: List[Any] = field(default_factory=list)
    errors: List[ErrorEvent] = field(default_factory=list)
    total: int = 0
    successful: int = 0
    failed: int = 0
    duration_ms: float = 0.0
    outcomes: List[TaskOutcome] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "BatchResult":
        return cls()

    @property
    def average_time_per_item(self) -> float:
        """Wall-clock batch time divided by item count, in milliseconds."""
        return self.duration_ms / self.total if self.total else 0.0

    @property
    def items_per_second(self) -> float:
        return self.total / self.duration_ms * 1000 if self.duration_ms > 0 else 0.0


ProgressCallback = Callable[[ProgressEvent], None]
ErrorCallback = Callable[[ErrorEvent], None]


@dataclass
class ConcurrencyConfig:
    """
    Scheduler configuration.

    ``concurrency`` is clamped into ``[1, cpu_count]`` before use; ``None``
    means one slot per available CPU. Callbacks and observers are composed,
    callbacks first.
    """

    concurrency: Optional[int] = None
    on_progress: Optional[ProgressCallback] = None
    on_error: Optional[ErrorCallback] = None
    observers: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class Dimensions:
    """Width and height of an image in pixels."""

    width: int
    height: int


@dataclass
class ConversionResult:
    """Result of converting (or analyzing) one image."""

    input_path: Path
    output_path: Optional[Path] = None
    original_size: int = 0
    output_size: int = 0
    size_savings: float = 0.0
    original_width: int = 0
    original_height: int = 0
    new_width: int = 0
    new_height: int = 0
    resized: bool = False
    preserve_exif: bool = False
    skipped: bool = False
    dry_run: bool = False
    processing_time: float = 0.0
    metadata_time: float = 0.0
    conversion_time: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON friendly dictionary."""
        return {
            'inputPath': str(self.input_path),
            'outputPath': str(self.output_path) if self.output_path else None,
            'originalSize': self.original_size,
            'outputSize': self.output_size,
            'sizeSavings': self.size_savings,
            'originalWidth': self.original_width,
            'originalHeight': self.original_height,
            'newWidth': self.new_width,
            'newHeight': self.new_height,
            'resized': self.resized,
            'preserveExif': self.preserve_exif,
            'skipped': self.skipped,
            'processingTime': self.processing_time,
            'metadataTime': self.metadata_time,
            'conversionTime': self.conversion_time,
        }


@dataclass
class ReportRow:
    """One line of a conversion report."""

    path: Path
    original_size: int = 0
    avif_size: int = 0
    reduction: float = 0.0
    time_ms: float = 0.0
    success: bool = True
    error: Optional[str] = None

    @property
    def file(self) -> str:
        return Path(self.path).name

    @classmethod
    def from_conversion(cls, result: ConversionResult) -> "ReportRow":
        return cls(
            path=result.input_path,
            original_size=result.original_size,
            avif_size=result.output_size,
            reduction=result.size_savings,
            time_ms=result.processing_time,
        )

    @classmethod
    def from_error(cls, event: ErrorEvent) -> "ReportRow":
        return cls(path=Path(event.item), success=False, error=str(event.error))


@dataclass
class OptimizationSummary:
    """Aggregate statistics for one optimizer run."""

    results: List[ConversionResult] = field(default_factory=list)
    errors: List[ErrorEvent] = field(default_factory=list)
    dry_run: bool = False
    skipped: int = 0
    excluded: int = 0
    concurrency: int = 1
    total_batch_time: float = 0.0

    @property
    def processed(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def resized(self) -> int:
        return sum(1 for r in self.results if r.resized)

    @property
    def total_original_size(self) -> int:
        return sum(r.original_size for r in self.results)

    @property
    def total_output_size(self) -> int:
        return sum(r.output_size for r in self.results)

    @property
    def total_savings(self) -> float:
        if self.total_original_size <= 0:
            return 0.0
        saved = self.total_original_size - self.total_output_size
        return round(saved / self.total_original_size * 100, 1)

    @property
    def total_processing_time(self) -> float:
        return sum(r.processing_time for r in self.results)

    @property
    def average_processing_time(self) -> float:
        return self.total_processing_time / len(self.results) if self.results else 0.0

    def report_rows(self) -> List[ReportRow]:
        rows = [ReportRow.from_conversion(r) for r in self.results]
        rows.extend(ReportRow.from_error(e) for e in self.errors)
        return rows

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the summary and per-file results for JSON output."""
        summary = {
            'analyzed' if self.dry_run else 'converted': self.processed,
            'skipped': self.skipped,
            'failed': self.failed,
            'resized': self.resized,
            'totalOriginalSize': self.total_original_size,
            'totalOutputSize': self.total_output_size,
            'totalSavings': self.total_savings,
            'totalBatchTime': self.total_batch_time,
            'totalProcessingTime': self.total_processing_time,
            'averageProcessingTime': self.average_processing_time,
            'concurrency': self.concurrency,
        }
        errors = [
            {'file': str(e.item), 'index': e.index, 'error': str(e.error)}
            for e in self.errors
        ]
        return {
            'summary': summary,
            'results': [r.to_dict() for r in self.results],
            'errors': errors,
        }
