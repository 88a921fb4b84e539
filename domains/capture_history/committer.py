"""
Commit executor for Capture History domain.

Stages and commits pending capture files. Never raises: every outcome is
reported as a ``CommitResult``.
"""

from datetime import datetime
from typing import Callable

from loguru import logger

from chat_watcher.models.schemas import CommitResult, CommitStatus
from chat_watcher.utils.errors import VersioningError
from chat_watcher.utils.helpers import format_timestamp
from domains.capture_history.versioning.backend import VersioningBackend


class CommitExecutor:
    """Run the add + commit sequence against the versioning engine."""

    def __init__(
        self,
        backend: VersioningBackend,
        pattern: str = "*.txt",
        marker: str = "auto: grok chat capture(s)",
        now: Callable[[], datetime] = datetime.now,
    ):
        self.backend = backend
        self.pattern = pattern
        self.marker = marker
        self.now = now

    def build_message(self) -> str:
        """Commit message: fixed marker plus a local timestamp."""
        return f"{self.marker} {format_timestamp(self.now())}"

    def attempt_commit(self) -> CommitResult:
        """
        Commit pending capture files, if any.

        Returns:
            ``noop`` when nothing matching is pending (engine untouched),
            ``committed`` on success, ``failed`` with a reason otherwise
        """
        try:
            pending = self.backend.pending_changes(self.pattern)
        except VersioningError as e:
            logger.error(f"Could not query pending changes: {e}")
            return CommitResult(status=CommitStatus.FAILED, reason=str(e))

        if not pending:
            logger.info("No changes to commit.")
            return CommitResult(status=CommitStatus.NOOP)

        message = self.build_message()
        logger.info(f"Committing {len(pending)} file(s): {', '.join(pending)}")

        try:
            self.backend.stage_all()
            self.backend.commit(message)
        except VersioningError as e:
            logger.error(f"Commit failed: {e}")
            return CommitResult(
                status=CommitStatus.FAILED, message=message, files=pending, reason=str(e)
            )

        logger.success(f"Commit finished: {message}")
        return CommitResult(status=CommitStatus.COMMITTED, message=message, files=pending)
