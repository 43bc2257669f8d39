"""
Clock implementations for the dispatch loop.
SystemClock follows wall-clock time; ManualClock is advanced explicitly.
"""

import asyncio
import contextlib
from datetime import UTC, datetime, timedelta

from reminder_engine.reminders.domain.clock_port import ClockPort


class SystemClock(ClockPort):
    """
    Wall-clock time.

    Sleeps are capped at `max_sleep_seconds` so a suspended host or a
    clock adjustment is noticed within that bound.
    """

    def __init__(self, max_sleep_seconds: float = 60.0) -> None:
        if max_sleep_seconds <= 0:
            raise ValueError("max_sleep_seconds must be positive")
        self.max_sleep_seconds = max_sleep_seconds

    def now(self) -> datetime:
        return datetime.now(UTC)

    async def wait_until(self, deadline: datetime | None, wakeup: asyncio.Event) -> None:
        timeout = self.max_sleep_seconds
        if deadline is not None:
            remaining = (deadline - self.now()).total_seconds()
            timeout = max(0.0, min(remaining, self.max_sleep_seconds))

        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(wakeup.wait(), timeout=timeout)


class ManualClock(ClockPort):
    """
    A simulated clock that only moves when told to.

    Example:
        clock = ManualClock(datetime(2026, 3, 1, 12, tzinfo=UTC))
        registry = ReminderRegistry(on_fire, clock)
        clock.advance(timedelta(hours=8))
    """

    def __init__(self, start: datetime | None = None) -> None:
        start = start or datetime.now(UTC)
        if start.tzinfo is None:
            raise ValueError("start must be timezone aware")
        self._now = start.astimezone(UTC)
        self._changed = asyncio.Event()

    def now(self) -> datetime:
        return self._now

    def set(self, instant: datetime) -> None:
        """Jump to an instant. Moving backwards is rejected."""
        if instant.tzinfo is None:
            raise ValueError("instant must be timezone aware")
        instant = instant.astimezone(UTC)
        if instant < self._now:
            raise ValueError(f"Cannot move clock backwards from {self._now} to {instant}")
        self._now = instant
        self._changed.set()

    def advance(self, delta: timedelta) -> datetime:
        """Move the clock forward and return the new time."""
        self.set(self._now + delta)
        return self._now

    async def wait_until(self, deadline: datetime | None, wakeup: asyncio.Event) -> None:
        while not wakeup.is_set() and (deadline is None or self._now < deadline):
            self._changed.clear()
            changed = asyncio.ensure_future(self._changed.wait())
            woken = asyncio.ensure_future(wakeup.wait())
            try:
                await asyncio.wait({changed, woken}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                for waiter in (changed, woken):
                    if not waiter.done():
                        waiter.cancel()
                        with contextlib.suppress(asyncio.CancelledError):
                            await waiter
