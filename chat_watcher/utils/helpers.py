"""
Helper utilities for chat-watcher.

Common functions shared by the capture history domain.
"""

import re
from datetime import datetime
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Optional

COMMIT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Suffixes SQLite adds next to a database while it is being written.
SQLITE_SIDECARS = ("-journal", "-wal", "-shm")


def normalise_path(path: Path) -> Path:
    """Return a resolved version of ``path`` without forcing existence."""

    try:
        return path.expanduser().resolve()
    except FileNotFoundError:
        return path.expanduser().absolute()


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """Human-readable local timestamp used in commit messages."""
    return (moment or datetime.now()).strftime(COMMIT_TIMESTAMP_FORMAT)


def repository_file_name(prefix: str, number: int, suffix: str) -> str:
    """Build ``<prefix>_<NNN><suffix>`` with at least three digits."""
    return f"{prefix}_{number:03d}{suffix}"


def repository_name_regex(prefix: str, suffix: str, min_digits: int = 3) -> re.Pattern:
    """Regex matching numbered repository file names, capturing the number."""
    return re.compile(rf"^{re.escape(prefix)}_(\d{{{min_digits},}}){re.escape(suffix)}$")


def matches_pattern(name: str, pattern: str) -> bool:
    """
    Check a bare file name against a glob pattern.

    Args:
        name: File name (no directory part)
        pattern: Glob such as ``*.txt``

    Returns:
        True if the name matches
    """
    return fnmatchcase(name, pattern)


def with_sidecars(names: Iterable[str]) -> set[str]:
    """Return ``names`` plus their SQLite journal siblings."""
    result = set()
    for name in names:
        result.add(name)
        for sidecar in SQLITE_SIDECARS:
            result.add(f"{name}{sidecar}")
    return result


def is_direct_child(path: Path, directory: Path) -> bool:
    """Check that ``path`` sits directly inside ``directory``."""
    return normalise_path(path).parent == normalise_path(directory)
