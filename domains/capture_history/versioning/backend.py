"""Capability interface for the versioning engine collaborator."""

from pathlib import Path
from typing import Protocol


class VersioningBackend(Protocol):
    """
    Operations the daemon consumes from the versioning engine.

    Every method may raise ``VersioningError``; nothing here is assumed
    to succeed.
    """

    def init(self, path: Path) -> None:
        """Create a new repository file at ``path``."""
        ...

    def open_checkout(self, path: Path) -> None:
        """Open ``path`` as a checkout rooted at the watched directory, keeping existing files."""
        ...

    def is_checkout(self) -> bool:
        """Whether the watched directory is already an active checkout."""
        ...

    def pending_changes(self, pattern: str) -> list[str]:
        """Uncommitted files (added, edited, removed or unmanaged) matching ``pattern``."""
        ...

    def stage_all(self) -> None:
        """Stage every addition and removal."""
        ...

    def commit(self, message: str) -> None:
        """Commit staged changes."""
        ...

    def ignore_list_add(self, entry: str) -> None:
        """Make the engine ignore ``entry`` from now on."""
        ...

    def internal_state_names(self) -> set[str]:
        """File names the engine itself writes inside the watched directory."""
        ...
