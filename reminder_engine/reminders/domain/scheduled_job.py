"""Scheduled job owned by the reminder registry."""

from dataclasses import dataclass, field
from datetime import datetime

from reminder_engine.reminders.domain.policy import ReminderPolicy
from reminder_engine.reminders.domain.trigger_calculator import (
    daily_cron_expression,
    parse_time_of_day,
)


@dataclass(eq=False)
class JobHandle:
    """Opaque cancelable token for one installed job.

    Attributes:
        user_id: Owner of the job
        cancelled: Set once the job has been removed or superseded
    """

    user_id: str
    cancelled: bool = False

    def cancel(self) -> None:
        """Mark the handle cancelled. A cancelled handle never fires again."""
        self.cancelled = True


@dataclass
class ScheduledJob:
    """A live daily reminder for one user.

    Attributes:
        user_id: Owner of the job
        timezone: IANA timezone the time of day is expressed in
        time_of_day: Local "HH:MM" fire time
        next_fire_at: Next fire instant (UTC)
        handle: Cancelable handle; identity changes on every upsert
        policy: Policy snapshot the job was installed with
        fire_count: Number of fires handed to the decision engine
    """

    user_id: str
    timezone: str
    time_of_day: str
    next_fire_at: datetime
    handle: JobHandle
    policy: ReminderPolicy
    fire_count: int = field(default=0)

    @property
    def cron_expression(self) -> str:
        hour, minute = parse_time_of_day(self.time_of_day)
        return daily_cron_expression(hour, minute)

    @property
    def is_active(self) -> bool:
        return not self.handle.cancelled

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary representation."""
        return {
            "user_id": self.user_id,
            "timezone": self.timezone,
            "time_of_day": self.time_of_day,
            "cron_expression": self.cron_expression,
            "next_fire_at": self.next_fire_at.isoformat(),
            "streak_protection": self.policy.streak_protection,
            "fire_count": self.fire_count,
        }
