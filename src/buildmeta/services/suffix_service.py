# src/buildmeta/services/suffix_service.py
import logging
import os
from collections import Counter
from pathlib import Path
from typing import Dict, Union

logger = logging.getLogger(__name__)


def suffix_key(file_name: str) -> str:
    """
    Returns the text after the last dot, or the base name (text before the
    first dot) when the file has no suffix.
    """
    _, dot, suffix = file_name.rpartition(".")
    if dot and suffix:
        return suffix
    return file_name.split(".", 1)[0]


class SuffixService:
    """Counts files under a directory tree by suffix."""

    def count(self, root: Union[str, Path]) -> Dict[str, int]:
        counts: Counter = Counter()
        for dirpath, _dirnames, filenames in os.walk(root):
            for file_name in filenames:
                counts[suffix_key(file_name)] += 1
        logger.debug("Counted %d files under %s", sum(counts.values()), root)
        return dict(sorted(counts.items()))

    def render_report(self, root: Union[str, Path], counts: Dict[str, int]) -> str:
        rule = "-" * 60
        lines = [f"File suffix/basename statistics for: {root}", rule]
        lines += [f"{key:<30}: {count}" for key, count in counts.items()]
        lines += [rule, f"Total unique suffixes/basenames: {len(counts)}"]
        return "\n".join(lines)
