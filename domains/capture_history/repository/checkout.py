"""Make the watched directory an active checkout of its repository."""

from pathlib import Path

from loguru import logger

from chat_watcher.models.schemas import CheckoutState, RepositoryHandle
from chat_watcher.utils.errors import StartupError, VersioningError
from domains.capture_history.versioning.backend import VersioningBackend


class CheckoutManager:
    """Idempotent checkout bootstrap."""

    def __init__(self, backend: VersioningBackend):
        self.backend = backend

    def ensure_checkout(self, directory: Path, handle: RepositoryHandle) -> CheckoutState:
        """
        Open ``handle`` as a checkout of ``directory`` unless it already is one.

        Pre-existing files in the directory are kept.

        Raises:
            StartupError: If the status query or the open fails
        """
        try:
            if self.backend.is_checkout():
                logger.info(f"Already in a checkout: {directory}")
                return CheckoutState(opened=False)

            logger.info(f"Opening checkout of {handle.name} in {directory}")
            self.backend.open_checkout(handle.path)

            if not self.backend.is_checkout():
                raise StartupError(f"{directory} is still not a checkout after opening {handle.name}")

        except VersioningError as e:
            raise StartupError(f"Failed to open checkout of {handle.name}: {e}") from e

        logger.success(f"Checkout opened: {directory}")
        return CheckoutState(opened=True)
