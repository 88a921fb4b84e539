"""Custom exceptions for chat-watcher operations"""

from typing import List, Optional


class ChatWatcherError(Exception):
    """Base exception for chat-watcher operations"""
    pass


class VersioningError(ChatWatcherError):
    """Versioning engine command failures"""

    def __init__(
        self,
        command: List[str],
        returncode: Optional[int] = None,
        stderr: str = "",
        detail: str = "",
    ):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"'{' '.join(command)}'"
        if returncode is not None:
            message += f" failed with exit code {returncode}"
        else:
            message += " failed"
        if detail:
            message += f": {detail}"
        elif stderr:
            message += f": {stderr.strip()[:500]}"
        super().__init__(message)


class StartupError(ChatWatcherError):
    """Repository bootstrap or checkout failures; the daemon must not start"""
    pass
