"""Image file discovery and exclusion filtering."""

import glob
import re
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from avif_optimizer.domain.models import SUPPORTED_FORMATS
from avif_optimizer.shared.logging import get_logger
from avif_optimizer.shared.types import PathLike

logger = get_logger(__name__)

IGNORED_DIRECTORIES = ('.git', 'node_modules')
GLOB_CHARS = ('*', '?', '[', '{')

# Innermost ``{a,b}`` group
_BRACE_GROUP = re.compile(r'\{([^{}]*,[^{}]*)\}')


def is_supported(path: PathLike) -> bool:
    return Path(path).suffix.lower() in SUPPORTED_FORMATS


def expand_braces(pattern: str) -> List[str]:
    """
    Expand shell-style ``{a,b}`` groups into separate glob patterns.

    ``"*.{jpg,png}"`` becomes ``["*.jpg", "*.png"]``. Nested groups are
    expanded from the inside out; a pattern without groups is returned as is.
    """
    match = _BRACE_GROUP.search(pattern)
    if not match:
        return [pattern]

    expanded: List[str] = []
    for option in match.group(1).split(','):
        candidate = pattern[:match.start()] + option + pattern[match.end():]
        for result in expand_braces(candidate):
            if result not in expanded:
                expanded.append(result)
    return expanded


def _glob_root(pattern: str) -> Path:
    """Leading directory of ``pattern`` that contains no glob characters."""
    parts = []
    for part in Path(pattern).parts:
        if any(ch in part for ch in GLOB_CHARS):
            break
        parts.append(part)
    return Path(*parts) if parts else Path('.')


def _is_ignored(path: Path, root: Path) -> bool:
    # Only directories below the search root count, not its ancestors
    try:
        relative = path.relative_to(root)
    except ValueError:
        relative = path
    return any(part in IGNORED_DIRECTORIES for part in relative.parent.parts)


def find_image_files(pattern: PathLike, recursive: bool = False) -> List[Path]:
    """
    Find supported image files for a file, directory or glob pattern.

    Glob patterns may use ``**`` and ``{a,b}`` alternatives. Files inside
    ``.git`` or ``node_modules`` below the searched directory are skipped.

    Args:
        pattern: Image file, directory, or glob pattern
        recursive: Descend into subdirectories when ``pattern`` is a directory

    Returns:
        Sorted, de-duplicated list of supported image paths
    """
    source = Path(pattern)

    if source.is_file():
        return [source] if is_supported(source) else []

    if source.is_dir():
        candidates: Iterable[Tuple[Path, Path]] = (
            (path, source) for path in (source.rglob('*') if recursive else source.glob('*'))
        )
    else:
        candidates = (
            (Path(match), _glob_root(expanded))
            for expanded in expand_braces(str(pattern))
            for match in glob.glob(expanded, recursive=True)
        )

    files = {
        path for path, root in candidates
        if path.is_file() and is_supported(path) and not _is_ignored(path, root)
    }
    logger.debug(f"Discovered {len(files)} image file(s) for {pattern}")
    return sorted(files)


def apply_exclusions(files: Sequence[Path], patterns: Sequence[str]) -> Tuple[List[Path], int]:
    """
    Drop files matching any exclusion pattern.

    A pattern matches when it matches either the whole path or the file name,
    so ``*.thumb.*`` excludes thumbnails in any directory.

    Returns:
        Remaining files and the number of excluded files
    """
    if not patterns:
        return list(files), 0

    kept: List[Path] = []
    excluded = 0
    for path in files:
        if any(fnmatch(str(path), p) or fnmatch(path.name, p) for p in patterns):
            excluded += 1
        else:
            kept.append(path)
    return kept, excluded
