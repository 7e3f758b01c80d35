"""Common type definitions."""

from typing import Any, Awaitable, Callable, Union
from pathlib import Path

# Type alias for paths
PathLike = Union[str, Path]

# Per-item operation run by the batch scheduler: sync or async, may raise
ItemOperation = Callable[[Any], Union[Any, Awaitable[Any]]]
