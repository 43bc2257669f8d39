"""Notification outcome events produced by the decision engine."""

from datetime import datetime
from enum import StrEnum, auto

from reminder_engine.event_system.domain.events import EventBase

NOTIFICATION_TOPIC = "reminders.notifications"


class NotificationKind(StrEnum):
    """What the decision engine chose for one fire.

    Attributes:
        STANDARD: Plain daily reminder
        STREAK_PROTECTION: Reminder that mentions the user's current streak
        SKIPPED: User already acted today, nothing sent
    """

    STANDARD = auto()
    STREAK_PROTECTION = auto()
    SKIPPED = auto()


class NotificationEvent(EventBase):
    """Outcome of one evaluation of a user's reminder.

    Not persisted. `delivered` is False for skipped and failed sends;
    `error` carries the dispatch failure, `degraded` marks a decision made
    without a working activity oracle.
    """

    def __init__(
        self,
        user_id: str,
        kind: NotificationKind,
        fired_at: datetime,
        streak_count: int | None = None,
        delivered: bool = False,
        error: str | None = None,
        degraded: bool = False,
        topic: str = NOTIFICATION_TOPIC,
    ) -> None:
        super().__init__(
            topic=topic,
            user_id=user_id,
            kind=str(kind),
            fired_at=fired_at.isoformat(),
            streak_count=streak_count,
            delivered=delivered,
            error=error,
            degraded=degraded,
        )
        self.user_id = user_id
        self.kind = kind
        self.fired_at = fired_at
        self.streak_count = streak_count
        self.delivered = delivered
        self.error = error
        self.degraded = degraded

    @property
    def failed(self) -> bool:
        """True when a send was attempted and did not succeed."""
        return self.kind != NotificationKind.SKIPPED and not self.delivered

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary representation."""
        return {
            "event_id": str(self.meta.event_id),
            "user_id": self.user_id,
            "kind": str(self.kind),
            "fired_at": self.fired_at.isoformat(),
            "streak_count": self.streak_count,
            "delivered": self.delivered,
            "error": self.error,
            "degraded": self.degraded,
        }
