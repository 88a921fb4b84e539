"""Common pytest fixtures for chat-watcher tests

Provides an in-memory versioning backend that tracks the real files of a
temporary directory, so the loop can be exercised without a Fossil binary.
"""

from fnmatch import fnmatchcase
from pathlib import Path

import pytest

from chat_watcher.utils.config import Settings
from chat_watcher.utils.errors import VersioningError
from chat_watcher.utils.helpers import with_sidecars

MUTATING = {"init", "open_checkout", "stage_all", "commit", "ignore_list_add"}


class InMemoryBackend:
    """Fake versioning engine keeping history in memory.

    Working files are read from disk; the repository and checkout markers
    are real (empty) files so directory scans see them. Every commit
    rewrites the checkout marker, like a real engine updating its state.
    """

    def __init__(self, directory: Path):
        self.directory = directory
        self.repository = None
        self.checked_out = False
        self.committed = {}
        self.staged = None
        self.history = []
        self.ignored = []
        self.calls = []
        self.fail_on = set()

    # helpers -----------------------------------------------------------------

    def _call(self, op: str):
        self.calls.append(op)
        if op in self.fail_on:
            raise VersioningError(["fake", op], 1, f"{op} refused")

    @property
    def mutations(self):
        return [op for op in self.calls if op in MUTATING]

    def _is_ignored(self, name: str) -> bool:
        if name.startswith(".") or name in self.internal_state_names():
            return True
        return any(fnmatchcase(name, glob) for glob in self.ignored)

    def _snapshot(self, pattern: str = "*") -> dict:
        if not self.directory.is_dir():
            raise VersioningError(["fake", "scan"], detail="directory missing")
        return {
            p.name: p.read_bytes()
            for p in self.directory.iterdir()
            if p.is_file() and not self._is_ignored(p.name) and fnmatchcase(p.name, pattern)
        }

    # VersioningBackend -------------------------------------------------------

    def init(self, path: Path) -> None:
        self._call("init")
        path.write_bytes(b"")
        self.repository = path

    def open_checkout(self, path: Path) -> None:
        self._call("open_checkout")
        self.repository = path
        self.checked_out = True
        (self.directory / ".fslckout").write_text("0")

    def is_checkout(self) -> bool:
        self._call("is_checkout")
        return self.checked_out

    def pending_changes(self, pattern: str) -> list[str]:
        self._call("pending_changes")
        current = self._snapshot(pattern)
        committed = {n: c for n, c in self.committed.items() if fnmatchcase(n, pattern)}
        return sorted(n for n in set(current) | set(committed) if current.get(n) != committed.get(n))

    def stage_all(self) -> None:
        self._call("stage_all")
        self.staged = self._snapshot()

    def commit(self, message: str) -> None:
        self._call("commit")
        if self.staged is None or self.staged == self.committed:
            raise VersioningError(["fake", "commit"], 1, "nothing has changed")

        changed = sorted(
            n for n in set(self.staged) | set(self.committed)
            if self.staged.get(n) != self.committed.get(n)
        )
        self.history.append((message, changed))
        self.committed = self.staged
        self.staged = None
        (self.directory / ".fslckout").write_text(str(len(self.history)))

    def ignore_list_add(self, entry: str) -> None:
        self._call("ignore_list_add")
        if entry not in self.ignored:
            self.ignored.append(entry)

    def internal_state_names(self) -> set[str]:
        names = with_sidecars([".fslckout", "_FOSSIL_"])
        if self.repository is not None:
            names |= with_sidecars([self.repository.name])
        return names


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def capture_dir(tmp_path):
    """Empty watched directory."""
    directory = tmp_path / "captures"
    directory.mkdir()
    return directory


@pytest.fixture
def backend(capture_dir):
    return InMemoryBackend(capture_dir)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fast_settings(capture_dir):
    """Settings with short timers for loop tests."""
    return Settings(
        watch_dir=capture_dir,
        quiet_period=0.4,
        min_commit_spacing=0.2,
        probe_interval=0.5,
        tick_interval=0.05,
    )
