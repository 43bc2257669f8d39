"""Reminder policy model and schedule validation."""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, NamedTuple
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from reminder_engine.errors import ConfigError
from reminder_engine.reminders.domain.trigger_calculator import (
    parse_time_of_day,
    resolve_timezone,
)


class ReminderPolicy(BaseModel):
    """
    A user's daily reminder configuration.

    Accepts the settings payload shape
    ``{"enabled", "time", "timezone", "streakProtection"}`` as well as the
    Python field names. Only types are checked here; use
    ``validate_schedule`` to check the time and timezone.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    enabled: bool = False
    time_of_day: str = Field(default="20:00", alias="time", examples=["20:00", "07:30"])
    timezone: str = Field(default="UTC", examples=["UTC", "Europe/Berlin"])
    streak_protection: bool = Field(default=True, alias="streakProtection")
    last_notified: datetime | None = Field(default=None, alias="lastNotified")


class ValidatedSchedule(NamedTuple):
    """Parsed, known-good schedule of a policy."""

    hour: int
    minute: int
    zone: ZoneInfo


def coerce_policy(policy: "ReminderPolicy | Mapping[str, Any]") -> ReminderPolicy:
    """
    Turn a raw settings mapping into a ReminderPolicy.

    Raises:
        ConfigError: If the mapping has values of the wrong type.
    """
    if isinstance(policy, ReminderPolicy):
        return policy
    try:
        return ReminderPolicy.model_validate(dict(policy))
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise ConfigError(f"Invalid reminder policy: {first['msg']}", field=field) from e
    except TypeError as e:
        raise ConfigError(f"Invalid reminder policy: {e}") from e


def validate_schedule(policy: ReminderPolicy) -> ValidatedSchedule:
    """
    Check that a policy's time of day and timezone can be scheduled.

    Raises:
        ConfigError: On a malformed time or unknown timezone.
    """
    hour, minute = parse_time_of_day(policy.time_of_day)
    zone = resolve_timezone(policy.timezone)
    return ValidatedSchedule(hour, minute, zone)
