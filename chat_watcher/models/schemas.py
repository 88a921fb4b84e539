"""
Pydantic models for chat-watcher.

Shared data models across the capture history domain.
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel


# =====================================================
# Repository Models
# =====================================================

class RepositoryHandle(BaseModel):
    """Numbered repository file living in the watched directory."""
    path: Path
    number: int
    created: bool = False  # bootstrapped by this run

    @property
    def name(self) -> str:
        return self.path.name


class CheckoutState(BaseModel):
    """Result of ensuring the watched directory is a working checkout."""
    opened: bool = False  # True only when this call performed the open


# =====================================================
# Commit Models
# =====================================================

class CommitStatus(str, Enum):
    COMMITTED = "committed"
    NOOP = "noop"
    FAILED = "failed"


class CommitResult(BaseModel):
    """Outcome of a single commit attempt."""
    status: CommitStatus
    message: Optional[str] = None
    files: List[str] = []
    reason: Optional[str] = None


# =====================================================
# Loop Models
# =====================================================

class SchedulerState(str, Enum):
    IDLE = "idle"
    PENDING_QUIET = "pending_quiet"
    COMMITTING = "committing"
    COOLDOWN = "cooldown"


class DetectorSignal(str, Enum):
    CHANGE = "change"
    PENDING = "pending"  # state probe found uncommitted captures
    TIMEOUT = "timeout"
    TERMINAL = "terminal"  # watched directory disappeared
    STOPPED = "stopped"
