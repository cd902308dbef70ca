# src/modscan_shell/core/services/file_walker_service.py
import fnmatch
import logging
import os
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)


class ScanRootError(Exception):
    """Raised when the directory to scan does not exist or is not a directory."""


def ensure_root(root: Union[str, Path]) -> Path:
    """
    Validates the scan root before any processing starts.

    Args:
        root: Directory given by the user.

    Returns:
        The resolved root path.

    Raises:
        ScanRootError: If the path is missing or is not a directory.
    """
    path = Path(root).expanduser()
    if not path.exists():
        raise ScanRootError(f"Directory does not exist: {root}")
    if not path.is_dir():
        raise ScanRootError(f"Not a directory: {root}")
    return path.resolve()


def find_files(root: Union[str, Path], pattern: str) -> List[Path]:
    """
    Recursively collects files whose name matches `pattern` (fnmatch syntax).

    Returns:
        Matching paths in sorted order, so runs over the same tree visit files
        in the same sequence.
    """
    base = ensure_root(root)
    matches: List[Path] = []
    for dirpath, _dirnames, filenames in os.walk(base):
        for name in fnmatch.filter(filenames, pattern):
            matches.append(Path(dirpath) / name)
    matches.sort()
    logger.debug("Found %d file(s) matching '%s' under %s", len(matches), pattern, base)
    return matches
