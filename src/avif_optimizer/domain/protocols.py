"""Protocol definitions for dependency inversion."""

from typing import Protocol, Any
from pathlib import Path

from .models import ConversionResult, ProgressEvent, ErrorEvent


class IParallelismProvider(Protocol):
    """Reports the resources of the host a batch runs on."""

    def cpu_count(self) -> int:
        """Number of parallel-execution units available."""
        ...

    def available_memory(self) -> int:
        """Estimated available system memory in bytes."""
        ...


class IBatchObserver(Protocol):
    """Receives per-item notifications from the batch scheduler."""

    def on_progress(self, event: ProgressEvent) -> None:
        """Called once per successful item, in completion order."""
        ...

    def on_error(self, event: ErrorEvent) -> None:
        """Called once per failed item, in completion order."""
        ...


class IConverter(Protocol):
    """Interface for the image codec."""

    def convert(self, path: Path, config: Any) -> ConversionResult:
        """Convert one image file and write the result to disk."""
        ...

    def analyze(self, path: Path, config: Any) -> ConversionResult:
        """Estimate the conversion of one image without writing anything."""
        ...


class ILogger(Protocol):
    """Interface for logging."""

    def debug(self, message: str, **kwargs) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, **kwargs) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, **kwargs) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, **kwargs) -> None:
        """Log error message."""
        ...

    def exception(self, message: str, **kwargs) -> None:
        """Log exception with traceback."""
        ...
