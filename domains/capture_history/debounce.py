"""
Debounce scheduler for Capture History domain.

Decides when a burst of change signals has settled long enough to commit.

States::

    idle          --signal-->                      pending_quiet
    pending_quiet --signal-->                      pending_quiet (timer refreshed)
    idle/cooldown --pending-->                     pending_quiet
    pending_quiet --pending-->                     pending_quiet (timer kept)
    pending_quiet --quiet elapsed, cooldown ok-->  committing
    pending_quiet --quiet elapsed, cooldown not--> idle (signal dropped)
    committing    --complete-->                    cooldown
    cooldown      --spacing elapsed-->             idle

A signal dropped at the cooldown boundary is picked up again by the next
detector signal or state probe while the changes are still pending.
"""

import time
from typing import Callable, Optional

from loguru import logger

from chat_watcher.models.schemas import SchedulerState


class DebounceScheduler:
    """Coalesce change signals into spaced commit attempts."""

    def __init__(
        self,
        quiet_period: float,
        min_commit_spacing: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize debounce scheduler.

        Args:
            quiet_period: Seconds without a signal before a commit may fire
            min_commit_spacing: Seconds between the end of one commit attempt
                and the start of the next
            clock: Monotonic time source, injectable for tests
        """
        self.quiet_period = quiet_period
        self.min_commit_spacing = min_commit_spacing
        self.clock = clock

        self.state = SchedulerState.IDLE
        self.last_signal_time: Optional[float] = None
        self.last_commit_time: Optional[float] = None

    def _now(self, now: Optional[float]) -> float:
        return self.clock() if now is None else now

    def quiet_elapsed(self, now: float) -> bool:
        if self.last_signal_time is None:
            return True
        return now - self.last_signal_time >= self.quiet_period

    def cooldown_elapsed(self, now: float) -> bool:
        if self.last_commit_time is None:
            return True
        return now - self.last_commit_time >= self.min_commit_spacing

    def eligible(self, now: Optional[float] = None) -> bool:
        """Whether both the quiet period and the commit spacing have passed."""
        now = self._now(now)
        return self.quiet_elapsed(now) and self.cooldown_elapsed(now)

    def signal(self, now: Optional[float] = None):
        """Record a change signal, restarting the quiet period."""
        if self.state == SchedulerState.COMMITTING:
            return

        now = self._now(now)
        if self.state != SchedulerState.PENDING_QUIET:
            logger.debug(f"Change detected, waiting {self.quiet_period}s for quiet")

        self.last_signal_time = now
        self.state = SchedulerState.PENDING_QUIET

    def notice_pending(self, now: Optional[float] = None):
        """
        Record that uncommitted captures still exist.

        Only starts a quiet period from idle or cooldown; an already running
        quiet period is left untouched so repeated checks cannot postpone it.
        """
        if self.state in (SchedulerState.IDLE, SchedulerState.COOLDOWN):
            self.signal(now)

    def poll(self, now: Optional[float] = None) -> bool:
        """
        Advance timers.

        Returns:
            True when a commit attempt should start now (state is then
            ``committing`` until ``complete`` is called)
        """
        now = self._now(now)

        if self.state == SchedulerState.PENDING_QUIET and self.quiet_elapsed(now):
            if self.eligible(now):
                self.state = SchedulerState.COMMITTING
                return True

            logger.debug("Quiet period elapsed inside cooldown, dropping signal")
            self.state = SchedulerState.IDLE

        elif self.state == SchedulerState.COOLDOWN and self.cooldown_elapsed(now):
            self.state = SchedulerState.IDLE

        return False

    def complete(self, now: Optional[float] = None):
        """Finish a commit attempt; successful, no-op and failed attempts all count."""
        self.last_commit_time = self._now(now)
        self.state = SchedulerState.COOLDOWN

    def time_until_due(self, now: Optional[float] = None) -> Optional[float]:
        """
        Seconds until the next timer-driven transition.

        Returns:
            Remaining quiet or cooldown time, or None when idle
        """
        now = self._now(now)

        if self.state == SchedulerState.PENDING_QUIET:
            return max(0.0, self.last_signal_time + self.quiet_period - now)

        if self.state == SchedulerState.COOLDOWN:
            return max(0.0, self.last_commit_time + self.min_commit_spacing - now)

        return None
