"""User input validation for the CLI."""

import os
from pathlib import Path
from typing import Any, Optional, Sequence

from avif_optimizer.domain.exceptions import InputValidationError
from avif_optimizer.shared.types import PathLike

GLOB_CHARS = ('*', '?', '[', '{')
WRITE_PROBE_NAME = '.avif-optimizer-test'
MAX_DIMENSION = 50000


def validate_numeric_range(
    value: Any,
    minimum: int,
    maximum: int,
    name: str,
    examples: Sequence[str] = ()
) -> int:
    """
    Parse ``value`` as an integer and check it lies in ``[minimum, maximum]``.

    Floating point input is truncated (``"60.7"`` -> 60).

    Raises:
        InputValidationError: If the value is not numeric or out of range
    """
    suggestions = [f"Examples: {', '.join(examples)}"] if examples else []
    try:
        number = int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        raise InputValidationError(f"{name} must be a number", suggestions) from None

    if number < minimum or number > maximum:
        raise InputValidationError(
            f"{name} must be between {minimum} and {maximum} (provided: {number})",
            suggestions,
        )
    return number


def validate_quality(value: Any) -> int:
    return validate_numeric_range(
        value, 1, 100, 'Quality', ['--quality 60', '--quality 80', '--quality 90']
    )


def validate_effort(value: Any) -> int:
    return validate_numeric_range(
        value, 1, 10, 'Effort', ['--effort 4', '--effort 6', '--effort 8']
    )


def validate_dimension(value: Any, name: str, examples: Sequence[str] = ()) -> int:
    return validate_numeric_range(value, 1, MAX_DIMENSION, name, examples)


def validate_width(value: Any) -> int:
    return validate_dimension(
        value, 'Max width', ['--max-width 800', '--max-width 1200', '--max-width 1920']
    )


def validate_height(value: Any) -> int:
    return validate_dimension(
        value, 'Max height', ['--max-height 600', '--max-height 1200', '--max-height 1080']
    )


def validate_concurrency(value: Any) -> int:
    return validate_numeric_range(
        value, 1, 1024, 'Concurrency', ['--concurrency 2', '--concurrency 8']
    )


def glob_base(pattern: str) -> str:
    """Leading path components of ``pattern`` that contain no glob characters."""
    parts = []
    for part in Path(pattern).parts:
        if any(ch in part for ch in GLOB_CHARS):
            break
        parts.append(part)
    return str(Path(*parts)) if parts else '.'


def validate_input_exists(input_path: str) -> Path:
    """
    Check that an input file, directory or glob base directory exists.

    Returns:
        Resolved path that was checked

    Raises:
        InputValidationError: If the path is missing or inaccessible
    """
    checked = glob_base(input_path) if any(ch in input_path for ch in GLOB_CHARS) else input_path
    resolved = Path(checked).resolve()

    try:
        resolved.stat()
    except FileNotFoundError:
        raise InputValidationError(
            f"Input path does not exist: {resolved} (input: {input_path})",
            [
                "Check if the path is spelled correctly",
                'Use quotes around paths with spaces: "my folder/image.jpg"',
                "For glob patterns, ensure the base directory exists",
                "Use relative paths from current directory or absolute paths",
            ],
        ) from None
    except OSError as e:
        raise InputValidationError(f"Cannot access input path {resolved}: {e}") from e

    return resolved


def validate_output_directory(output_dir: Optional[PathLike]) -> Optional[Path]:
    """
    Make sure ``output_dir`` exists (creating it if needed) and is writable.

    ``None`` means "next to the input files" and is accepted as is.

    Raises:
        InputValidationError: If the directory cannot be created or written
    """
    if not output_dir:
        return None

    resolved = Path(output_dir).resolve()

    if resolved.exists() and not resolved.is_dir():
        raise InputValidationError(
            f"Output path exists but is not a directory: {resolved}",
            ["Please specify a directory path for output"],
        )

    try:
        resolved.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InputValidationError(
            f"Cannot create output directory {resolved}: {e}",
            [
                "Check parent directory permissions",
                "Ensure parent directories exist",
                "Try using an absolute path",
            ],
        ) from e

    probe = resolved / WRITE_PROBE_NAME
    try:
        probe.write_text('')
        os.remove(probe)
    except OSError as e:
        raise InputValidationError(
            f"Cannot write to output directory {resolved}: {e}",
            [
                "Check directory permissions",
                "Ensure the directory is not read-only",
            ],
        ) from e

    return resolved
