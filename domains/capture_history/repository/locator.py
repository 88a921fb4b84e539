#!/usr/bin/env python3
"""
Repository locator for Capture History domain.

Scans the watched directory for ``<prefix>_<NNN><suffix>`` repository files
and returns the highest numbered one. When none exists, the next number is
allocated and a fresh repository is initialised.
"""

from pathlib import Path

from loguru import logger

from chat_watcher.models.schemas import RepositoryHandle
from chat_watcher.utils.errors import StartupError, VersioningError
from chat_watcher.utils.helpers import (
    SQLITE_SIDECARS,
    repository_file_name,
    repository_name_regex,
)
from domains.capture_history.versioning.backend import VersioningBackend


class RepositoryLocator:
    """Locate or bootstrap the numbered repository of a directory."""

    def __init__(self, backend: VersioningBackend, prefix: str, suffix: str):
        """
        Initialize repository locator.

        Args:
            backend: Versioning engine used to create a missing repository
            prefix: Repository file name prefix
            suffix: Repository file name suffix (e.g. ``.fossil``)
        """
        self.backend = backend
        self.prefix = prefix
        self.suffix = suffix
        self._name_regex = repository_name_regex(prefix, suffix)
        self._loose_regex = repository_name_regex(prefix, suffix, min_digits=1)

    def scan(self, directory: Path, strict: bool = True) -> dict[int, Path]:
        """
        Find numbered repository files directly inside ``directory``.

        Args:
            directory: Directory to scan (non-recursive)
            strict: Only accept zero-padded (3+ digit) numbers

        Returns:
            Mapping of repository number to path
        """
        regex = self._name_regex if strict else self._loose_regex
        found = {}

        for entry in directory.iterdir():
            match = regex.match(entry.name)
            if match is None or not entry.is_file():
                continue
            found[int(match.group(1))] = entry

        return found

    def locate(self, directory: Path) -> RepositoryHandle:
        """
        Return the highest numbered repository, creating ``001`` if none exists.

        Args:
            directory: Watched directory

        Returns:
            Handle to the existing or freshly created repository

        Raises:
            StartupError: If the directory cannot be scanned or init fails
        """
        try:
            existing = self.scan(directory)
            # Unpadded leftovers (e.g. prefix_7.fossil) still reserve their number.
            reserved = existing or self.scan(directory, strict=False)
        except OSError as e:
            raise StartupError(f"Cannot scan {directory}: {e}") from e

        if existing:
            # Gaps are tolerated; the highest number always wins.
            number = max(existing)
            logger.info(f"Found existing repo: {existing[number].name}")
            return RepositoryHandle(path=existing[number], number=number, created=False)

        number = max(reserved, default=0) + 1
        path = directory / repository_file_name(self.prefix, number, self.suffix)

        logger.info(f"No repo found, creating {path}")
        try:
            self.backend.init(path)
        except VersioningError as e:
            raise StartupError(f"Failed to initialise repository {path.name}: {e}") from e

        self._ignore_repository_files(path.name)

        logger.success(f"Created repository: {path.name}")
        return RepositoryHandle(path=path, number=number, created=True)

    def _ignore_repository_files(self, name: str):
        """Keep the engine from tracking its own container and journals."""
        entries = [name] + [f"*{sidecar}" for sidecar in SQLITE_SIDECARS]

        for entry in entries:
            try:
                self.backend.ignore_list_add(entry)
            except VersioningError as e:
                logger.warning(f"Could not add '{entry}' to ignore list: {e}")
