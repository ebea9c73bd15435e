"""
Rest timer between sets.

The timer never counts ticks. It stores one absolute expiry timestamp
(epoch milliseconds) and derives the remaining seconds from the clock on
every poll, so a timer persisted before a restart resumes with the right
amount of rest left.

Each armed expiry is wrapped in a ScheduledRest token. Re-arming or
cancelling invalidates the previous token, which keeps stale ticks from
clearing a newer rest period.
"""

import math
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from .config import TIMER_TICK_SECONDS

Clock = Callable[[], float]  # epoch seconds, e.g. time.time


def now_ms(clock: Clock) -> int:
    return int(round(clock() * 1000))


def remaining_seconds(timer_end_time: int, now_seconds: float) -> int:
    """
    Whole seconds left until timer_end_time, never negative.

    Rounds half up, so 59.5 s left displays as 60.
    """
    raw = (timer_end_time - now_seconds * 1000) / 1000
    return max(0, math.floor(raw + 0.5))


@dataclass(frozen=True)
class RestMessage:
    """Background notification request: fire ``duration`` seconds from receipt."""

    duration: int
    next_up: str


class RestNotifier(Protocol):
    """Out-of-band channel that alerts the user when rest is over."""

    def post(self, message: RestMessage) -> None:
        ...


class NullNotifier:
    """Notifier that drops every message."""

    def post(self, message: RestMessage) -> None:
        return None


@dataclass
class ScheduledRest:
    """Cancellation token for one armed expiry."""

    end_time: int
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class RestTimer:
    """Countdown bound to a single absolute expiry timestamp."""

    def __init__(self, clock: Clock = time.time):
        self.clock = clock
        self._scheduled: ScheduledRest | None = None

    @property
    def is_running(self) -> bool:
        return self._scheduled is not None and not self._scheduled.cancelled

    def arm(self, end_time: int) -> ScheduledRest:
        """Start counting down to end_time, replacing any previous rest."""
        self.cancel()
        self._scheduled = ScheduledRest(end_time=end_time)
        return self._scheduled

    def cancel(self) -> None:
        if self._scheduled is not None:
            self._scheduled.cancel()
        self._scheduled = None

    def remaining(self) -> int | None:
        """Seconds left, or None if no rest is armed."""
        if not self.is_running:
            return None
        assert self._scheduled is not None
        return remaining_seconds(self._scheduled.end_time, self.clock())

    def poll(self, token: ScheduledRest | None = None) -> int | None:
        """
        Recompute the remaining seconds.

        Once the countdown reaches 0 the timer disarms itself. A stale token
        (one that has since been replaced or cancelled) yields None.

        Args:
            token: Token the caller armed; defaults to the current one

        Returns:
            Remaining seconds (0 means the rest just ended) or None
        """
        if token is not None and (token.cancelled or token is not self._scheduled):
            return None
        left = self.remaining()
        if left == 0:
            self.cancel()
        return left

    def countdown(
        self,
        on_tick: Callable[[int], None],
        sleep: Callable[[float], None] = time.sleep,
        interval: float = TIMER_TICK_SECONDS,
    ) -> bool:
        """
        Block until the armed rest ends, calling on_tick each interval.

        Returns:
            True if the rest ran out, False if it was cancelled meanwhile
        """
        token = self._scheduled
        if token is None:
            return False
        while True:
            left = self.poll(token)
            if left is None:
                return False
            on_tick(left)
            if left == 0:
                return True
            sleep(interval)
