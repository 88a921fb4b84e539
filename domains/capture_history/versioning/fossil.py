"""
Fossil command line backend.

Every operation shells out to the ``fossil`` binary from inside the
watched directory. Failures are raised as ``VersioningError``.
"""

import subprocess
from pathlib import Path
from typing import List, Optional

from loguru import logger

from chat_watcher.utils.errors import VersioningError
from chat_watcher.utils.helpers import matches_pattern, with_sidecars

CHECKOUT_MARKERS = (".fslckout", "_FOSSIL_")
JOURNAL_NAMES = (".fossil-journal", ".fossil-wal")
SETTINGS_DIR = ".fossil-settings"


class FossilBackend:
    """Drive a Fossil checkout rooted at ``directory``."""

    def __init__(
        self,
        directory: Path,
        binary: str = "fossil",
        timeout: float = 120.0,
        repository: Optional[Path] = None,
    ):
        """
        Initialize Fossil backend.

        Args:
            directory: Watched directory; every command runs from here
            binary: Fossil executable name or path
            timeout: Per-command timeout in seconds
            repository: Repository file, once known (used for state names)
        """
        self.directory = Path(directory)
        self.binary = binary
        self.timeout = timeout
        self.repository = repository

    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """
        Run a fossil command in the watched directory.

        The child gets its own session so a terminal interrupt aimed at the
        daemon does not kill a commit halfway through.

        Raises:
            VersioningError: If the command cannot run, times out, or
                exits non-zero while ``check`` is set
        """
        cmd = [self.binary] + args
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                cwd=str(self.directory),
                capture_output=True,
                text=True,
                timeout=self.timeout,
                stdin=subprocess.DEVNULL,
                start_new_session=True,
            )
        except FileNotFoundError as e:
            raise VersioningError(cmd, detail=f"executable not found ({e})")
        except subprocess.TimeoutExpired:
            raise VersioningError(cmd, detail=f"timed out after {self.timeout}s")
        except OSError as e:
            raise VersioningError(cmd, detail=str(e))

        if check and result.returncode != 0:
            raise VersioningError(cmd, result.returncode, result.stderr or result.stdout)

        return result

    def init(self, path: Path) -> None:
        self._run(["init", str(path)])
        self.repository = Path(path)

    def open_checkout(self, path: Path) -> None:
        # --force: the directory already holds the repository file and captures
        self._run(["open", str(path), "--keep", "--force"])
        self.repository = Path(path)

    def is_checkout(self) -> bool:
        if not any((self.directory / marker).is_file() for marker in CHECKOUT_MARKERS):
            return False
        return self._run(["status"], check=False).returncode == 0

    def pending_changes(self, pattern: str) -> list[str]:
        result = self._run(["changes", "--differ", "--no-classify"])
        ignored = self.internal_state_names()

        pending = []
        for line in result.stdout.splitlines():
            name = line.strip()
            if not name or "/" in name or "\\" in name:
                continue
            if name in ignored or not matches_pattern(name, pattern):
                continue
            pending.append(name)

        return sorted(pending)

    def stage_all(self) -> None:
        self._run(["addremove"])

    def commit(self, message: str) -> None:
        self._run(["commit", "-m", message, "--no-warnings"])

    def ignore_list_add(self, entry: str) -> None:
        """Append ``entry`` to the versioned ignore-glob setting file."""
        settings_file = self.directory / SETTINGS_DIR / "ignore-glob"

        try:
            existing = settings_file.read_text(encoding="utf-8").splitlines() if settings_file.exists() else []
            if entry in (line.strip() for line in existing):
                return

            settings_file.parent.mkdir(parents=True, exist_ok=True)
            with settings_file.open("a", encoding="utf-8") as f:
                f.write(f"{entry}\n")

        except OSError as e:
            raise VersioningError(["ignore-glob", "add", entry], detail=str(e))

        logger.debug(f"Added '{entry}' to {settings_file}")

    def internal_state_names(self) -> set[str]:
        names = with_sidecars(CHECKOUT_MARKERS) | set(JOURNAL_NAMES)
        if self.repository is not None:
            names |= with_sidecars([self.repository.name])
        return names
