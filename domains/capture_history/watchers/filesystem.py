#!/usr/bin/env python3
"""
File system watcher for Capture History domain.

Watches the capture directory (non-recursively) for new or changed capture
files. Uses watchdog for event notification and periodically asks the
versioning engine for pending changes in case a notification was missed.
"""

import threading
import time
from pathlib import Path
from typing import Callable, Iterable, Optional

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from chat_watcher.models.schemas import DetectorSignal
from chat_watcher.utils.errors import VersioningError
from chat_watcher.utils.helpers import is_direct_child, matches_pattern
from domains.capture_history.versioning.backend import VersioningBackend


class CaptureEventHandler(FileSystemEventHandler):
    """Watchdog handler that flags relevant capture file events."""

    def __init__(
        self,
        directory: Path,
        pattern: str,
        ignored_names: Iterable[str],
        on_change: Callable[[str], None],
    ):
        """
        Initialize event handler.

        Args:
            directory: Watched directory
            pattern: Glob for capture files (e.g. ``*.txt``)
            ignored_names: Engine state files that must never trigger
            on_change: Called with the path of each relevant event
        """
        super().__init__()
        self.directory = directory
        self.pattern = pattern
        self.ignored_names = set(ignored_names)
        self.on_change = on_change

    def should_process(self, path: str) -> bool:
        """
        Check if path is a capture file.

        Args:
            path: File path from the event

        Returns:
            True if the event should produce a change signal
        """
        path_obj = Path(path)

        if path_obj.name in self.ignored_names:
            return False

        if not matches_pattern(path_obj.name, self.pattern):
            return False

        return is_direct_child(path_obj, self.directory)

    def _handle(self, event: FileSystemEvent, path: Optional[str]):
        if event.is_directory or not path:
            return
        if self.should_process(path):
            self.on_change(path)

    def on_created(self, event: FileSystemEvent):
        """Handle file creation."""
        self._handle(event, event.src_path)

    def on_modified(self, event: FileSystemEvent):
        """Handle file modification."""
        self._handle(event, event.src_path)

    def on_deleted(self, event: FileSystemEvent):
        """Handle file deletion; removals are committed too."""
        self._handle(event, event.src_path)

    def on_moved(self, event: FileSystemEvent):
        """Handle rename, e.g. a download finishing under its final name."""
        self._handle(event, getattr(event, "dest_path", None))


class ChangeDetector:
    """
    Single source of change signals for the run loop.

    Watchdog events set one coalescing flag; the periodic state probe
    reports separately as ``pending`` so it can start a debounce but never
    extend one. Both are consumed through ``next_signal``.
    """

    def __init__(
        self,
        directory: Path,
        backend: VersioningBackend,
        pattern: str = "*.txt",
        probe_interval: float = 10.0,
        ignored_names: Iterable[str] = (),
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize change detector.

        Args:
            directory: Watched directory
            backend: Versioning engine used by the state probe
            pattern: Glob for capture files
            probe_interval: Seconds between state probes
            ignored_names: Extra file names to ignore besides the engine's own
            clock: Monotonic time source
        """
        self.directory = directory
        self.backend = backend
        self.pattern = pattern
        self.probe_interval = probe_interval
        self.clock = clock

        self.ignored_names = set(ignored_names) | backend.internal_state_names()

        self._changed = threading.Event()
        self._stopping = threading.Event()
        self._last_probe: Optional[float] = None
        self.observer: Optional[Observer] = None

        self.event_handler = CaptureEventHandler(
            directory, pattern, self.ignored_names, self._on_event
        )

    def _on_event(self, path: str):
        logger.debug(f"Capture event: {path}")
        self._changed.set()

    def start(self):
        """Start the watchdog observer on the directory."""
        self.observer = Observer()
        self.observer.schedule(self.event_handler, str(self.directory), recursive=False)
        self.observer.daemon = True
        self.observer.start()
        logger.success(f"Started watching: {self.directory} ({self.pattern})")

    def probe(self) -> bool:
        """
        Ask the versioning engine for pending capture changes.

        Returns:
            True if uncommitted files matching the pattern exist
        """
        self._last_probe = self.clock()

        try:
            pending = self.backend.pending_changes(self.pattern)
        except VersioningError as e:
            logger.warning(f"State probe failed: {e}")
            return False

        if pending:
            logger.debug(f"State probe found {len(pending)} pending file(s)")
        return bool(pending)

    def _probe_due(self) -> bool:
        if self._last_probe is None:
            return True
        return self.clock() - self._last_probe >= self.probe_interval

    def next_signal(self, timeout: float) -> DetectorSignal:
        """
        Block until something happens or ``timeout`` seconds pass.

        Args:
            timeout: Maximum wait in seconds

        Returns:
            ``stopped`` after ``stop()``, ``terminal`` if the directory is
            gone, ``change`` for a file event, ``pending`` when the state
            probe found uncommitted captures, else ``timeout``
        """
        if not self._stopping.is_set() and not self._changed.is_set():
            self._changed.wait(timeout)

        if self._stopping.is_set():
            return DetectorSignal.STOPPED

        if not self.directory.is_dir():
            logger.info(f"Directory removed: {self.directory}")
            return DetectorSignal.TERMINAL

        if self._changed.is_set():
            self._changed.clear()
            return DetectorSignal.CHANGE

        if self._probe_due() and self.probe():
            return DetectorSignal.PENDING

        return DetectorSignal.TIMEOUT

    def stop(self):
        """Wake any waiter and make further waits return ``stopped``."""
        self._stopping.set()
        self._changed.set()

    def close(self):
        """Stop and join the observer thread."""
        self.stop()
        if self.observer is None:
            return

        try:
            self.observer.stop()
            self.observer.join(timeout=5)
        except RuntimeError as e:
            logger.warning(f"Observer did not stop cleanly: {e}")

        self.observer = None
        logger.info("File system observer stopped")
