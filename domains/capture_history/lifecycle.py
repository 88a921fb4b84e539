"""
Lifecycle controller for Capture History domain.

Bootstraps the repository and checkout once, then runs the
detect -> debounce -> commit loop until stopped or the directory vanishes.
"""

import time
from typing import Callable, Optional

from loguru import logger

from chat_watcher.models.schemas import (
    CheckoutState,
    CommitResult,
    DetectorSignal,
    RepositoryHandle,
)
from chat_watcher.utils.config import Settings
from chat_watcher.utils.errors import StartupError
from chat_watcher.utils.helpers import with_sidecars
from domains.capture_history.committer import CommitExecutor
from domains.capture_history.debounce import DebounceScheduler
from domains.capture_history.repository.checkout import CheckoutManager
from domains.capture_history.repository.locator import RepositoryLocator
from domains.capture_history.versioning.backend import VersioningBackend
from domains.capture_history.versioning.fossil import FossilBackend
from domains.capture_history.watchers.filesystem import ChangeDetector


class LifecycleController:
    """Owns the run loop and its clean shutdown."""

    def __init__(
        self,
        settings: Settings,
        backend: Optional[VersioningBackend] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize lifecycle controller.

        Args:
            settings: Daemon settings
            backend: Versioning engine; defaults to Fossil in the watched directory
            clock: Monotonic time source shared by detector and scheduler
        """
        self.settings = settings
        self.directory = settings.get_watch_dir()
        self.clock = clock

        self.backend = backend or FossilBackend(
            self.directory,
            binary=settings.fossil_bin,
            timeout=settings.command_timeout,
        )

        self.scheduler = DebounceScheduler(
            quiet_period=settings.quiet_period,
            min_commit_spacing=settings.min_commit_spacing,
            clock=clock,
        )
        self.executor = CommitExecutor(
            self.backend,
            pattern=settings.file_pattern,
            marker=settings.commit_marker,
        )

        self.detector: Optional[ChangeDetector] = None
        self.repository: Optional[RepositoryHandle] = None
        self.checkout: Optional[CheckoutState] = None
        self.last_result: Optional[CommitResult] = None
        self._stop_requested = False

    def startup(self):
        """
        Locate or create the repository and ensure the checkout.

        Raises:
            StartupError: If the directory is missing or bootstrap fails
        """
        if not self.directory.is_dir():
            raise StartupError(f"Watched directory does not exist: {self.directory}")

        locator = RepositoryLocator(
            self.backend, self.settings.repo_prefix, self.settings.repo_suffix
        )
        self.repository = locator.locate(self.directory)
        self.checkout = CheckoutManager(self.backend).ensure_checkout(
            self.directory, self.repository
        )

    def request_stop(self):
        """Ask the loop to finish; safe to call from a signal handler."""
        self._stop_requested = True
        if self.detector is not None:
            self.detector.stop()

    def step(self) -> bool:
        """
        Run one wait/decide/commit iteration.

        Returns:
            False when the loop should end
        """
        wait = self.scheduler.time_until_due()
        timeout = self.settings.tick_interval if wait is None else min(wait, self.settings.tick_interval)

        signal = self.detector.next_signal(timeout)

        if signal in (DetectorSignal.STOPPED, DetectorSignal.TERMINAL):
            return False

        if signal == DetectorSignal.CHANGE:
            self.scheduler.signal()
        elif signal == DetectorSignal.PENDING:
            self.scheduler.notice_pending()

        if self.scheduler.poll():
            logger.info("Detected relevant changes")
            self.last_result = self.executor.attempt_commit()
            self.scheduler.complete()

        return not self._stop_requested

    def run(self) -> int:
        """
        Run the daemon until stopped.

        Returns:
            Process exit code: 0 on clean shutdown, 1 on startup failure
        """
        try:
            self.startup()
        except StartupError as e:
            logger.error(f"Startup failed: {e}")
            return 1

        self.detector = ChangeDetector(
            self.directory,
            self.backend,
            pattern=self.settings.file_pattern,
            probe_interval=self.settings.probe_interval,
            ignored_names=with_sidecars([self.repository.name]),
            clock=self.clock,
        )

        try:
            self.detector.start()
        except OSError as e:
            logger.error(f"Failed to watch {self.directory}: {e}")
            self.detector.close()
            return 1

        logger.info(f"Watching {self.directory} for changes to files matching {self.settings.file_pattern}")
        logger.info(f"Auto-commit ~{self.settings.quiet_period}s after last relevant change.")

        try:
            if self._stop_requested:
                self.detector.stop()

            while self.step():
                pass

        finally:
            logger.info("Shutting down watcher cleanly...")
            self.detector.close()

        return 0
