"""Domain layer package."""

from .models import (
    SUPPORTED_FORMATS,
    WorkItem,
    TaskSuccess,
    TaskFailure,
    TaskOutcome,
    ProgressEvent,
    ErrorEvent,
    BatchResult,
    ConcurrencyConfig,
    Dimensions,
    ConversionResult,
    ReportRow,
    OptimizationSummary,
)
from .exceptions import (
    DomainException,
    ConfigurationError,
    InputValidationError,
    NoImagesFoundError,
    ConversionError,
    TaskTimeoutError,
    SchedulerInvariantError,
)
from .protocols import (
    IParallelismProvider,
    IBatchObserver,
    IConverter,
    ILogger,
)

__all__ = [
    # Models
    "SUPPORTED_FORMATS",
    "WorkItem",
    "TaskSuccess",
    "TaskFailure",
    "TaskOutcome",
    "ProgressEvent",
    "ErrorEvent",
    "BatchResult",
    "ConcurrencyConfig",
    "Dimensions",
    "ConversionResult",
    "ReportRow",
    "OptimizationSummary",
    # Exceptions
    "DomainException",
    "ConfigurationError",
    "InputValidationError",
    "NoImagesFoundError",
    "ConversionError",
    "TaskTimeoutError",
    "SchedulerInvariantError",
    # Protocols
    "IParallelismProvider",
    "IBatchObserver",
    "IConverter",
    "ILogger",
]
