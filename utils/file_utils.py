"""
File operation utilities
"""

import logging
import os
from typing import List, Sequence, Set

logger = logging.getLogger(__name__)


def list_candidate_files(directory: str) -> List[str]:
    """
    List regular files directly inside directory (non-recursive).

    Paths are joined onto directory exactly as given, so they can be matched
    verbatim against an ignore list. Symlinks to files are included;
    directories, symlinks to directories and special files are not.
    Raises OSError if the directory can't be read.
    """
    candidates = []

    with os.scandir(directory) as entries:
        for entry in sorted(entries, key=lambda e: e.name):
            try:
                if entry.is_file():
                    candidates.append(entry.path)
            except OSError as e:
                # broken entry; it can't be hashed either
                logger.debug("Skipping %s: %s", entry.path, e)

    return candidates


def load_ignore_list(ignore_file: str) -> Set[str]:
    """
    Read one path per line; lines are matched verbatim.

    Only '\\n' and '\\r\\n' end a line.
    """
    with open(ignore_file, 'r', encoding='utf-8', newline='') as f:
        text = f.read()

    lines = text.split('\n')
    if lines[-1] == '':
        lines.pop()
    return {line[:-1] if line.endswith('\r') else line for line in lines}


def apply_ignore(paths: Sequence[str], ignore_file: str) -> List[str]:
    """
    Drop paths whose string exactly equals a line of ignore_file.

    No normalization, resolution or globbing is applied.
    """
    ignored = load_ignore_list(ignore_file)
    kept = [p for p in paths if p not in ignored]
    logger.info("Ignore list %s removed %d of %d files",
                ignore_file, len(paths) - len(kept), len(paths))
    return kept


def format_file_size(size_bytes: int) -> str:
    """Format file size in human readable format"""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.2f} PB"
