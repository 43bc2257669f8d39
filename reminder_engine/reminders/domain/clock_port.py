"""Port for reading time and sleeping until a deadline."""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """Abstract clock used by the registry's dispatch loop."""

    @abstractmethod
    def now(self) -> datetime:
        """Current instant as a timezone-aware UTC datetime."""
        raise NotImplementedError

    @abstractmethod
    async def wait_until(self, deadline: datetime | None, wakeup: asyncio.Event) -> None:
        """
        Sleep until `deadline` passes or `wakeup` is set, whichever is first.

        Implementations may return early; callers re-check the time.

        Args:
            deadline: Instant to wake at, None to wait for `wakeup` only.
            wakeup: Event set by the registry when its schedule changes.
        """
        raise NotImplementedError
