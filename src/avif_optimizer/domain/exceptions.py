"""Domain exceptions for the image optimization pipeline."""

from typing import List, Optional


class DomainException(Exception):
    """Base exception for all domain errors."""
    pass


class ConfigurationError(DomainException):
    """Raised when configuration is invalid."""
    pass


class InputValidationError(DomainException):
    """Raised when user supplied input is rejected."""

    def __init__(self, message: str, suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.suggestions = list(suggestions or [])


class NoImagesFoundError(DomainException):
    """Raised when discovery yields no supported image files."""
    pass


class ConversionError(DomainException):
    """Raised when a single image cannot be converted."""

    def __init__(self, message: str, path: Optional[str] = None, hint: Optional[str] = None):
        super().__init__(message)
        self.path = path
        self.hint = hint


class TaskTimeoutError(DomainException):
    """Raised when a work item exceeds its time budget."""
    pass


class SchedulerInvariantError(DomainException):
    """Raised when the batch scheduler detects a defect in its own bookkeeping."""
    pass
