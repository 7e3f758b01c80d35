"""Centralized logging utilities."""

import logging
import sys
from dataclasses import dataclass
from typing import Optional, TextIO
from pathlib import Path


DEFAULT_FORMAT = '[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s'


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
    stream: Optional[TextIO] = None
) -> logging.Logger:
    """
    Set up a logger with console and optional file output.

    Args:
        name: Logger name
        level: Logging level
        log_file: Optional file to write logs to
        format_string: Custom format string
        stream: Console stream (stderr by default, stdout carries reports)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    if format_string is None:
        format_string = DEFAULT_FORMAT

    formatter = logging.Formatter(format_string, datefmt='%H:%M:%S')

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Loggers inside the package propagate to the ``avif_optimizer`` root
    logger, which is configured on first use.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    root = logging.getLogger('avif_optimizer')
    if not root.handlers:
        setup_logger('avif_optimizer', level=logging.WARNING)
    return logging.getLogger(name)


@dataclass(frozen=True)
class OutputSettings:
    """Console output mode for the presentation layer."""

    mode: str = 'normal'  # 'quiet', 'normal', 'verbose'
    json: bool = False

    def __post_init__(self):
        if self.mode not in ('quiet', 'normal', 'verbose'):
            raise ValueError(f"Invalid output mode: {self.mode}")

    @classmethod
    def from_flags(cls, verbose: bool = False, quiet: bool = False, json: bool = False) -> "OutputSettings":
        # quiet wins over verbose
        if quiet:
            mode = 'quiet'
        elif verbose:
            mode = 'verbose'
        else:
            mode = 'normal'
        return cls(mode=mode, json=json)

    @property
    def verbose(self) -> bool:
        return self.mode == 'verbose' and not self.json

    @property
    def normal(self) -> bool:
        return self.mode != 'quiet' and not self.json

    @property
    def log_level(self) -> int:
        if self.mode == 'verbose':
            return logging.DEBUG
        if self.mode == 'quiet' or self.json:
            return logging.WARNING
        return logging.INFO
