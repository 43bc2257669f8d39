"""
Trigger calculation for daily reminders.

Computes the next UTC instant at which a local wall-clock time occurs in a
given timezone. Pure functions only; the registry owns all state.

DST handling:
    - Spring forward: a wall time inside the gap does not exist. The fire
      happens at the first valid instant after the gap.
    - Fall back: a wall time inside the overlap occurs twice. Only the
      first occurrence fires.
"""

import re
from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from croniter import croniter  # type: ignore[import-untyped]

from reminder_engine.errors import ConfigError

_TIME_OF_DAY = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")

# Today (possibly already past in the overlap hour), tomorrow, one spare day.
_MAX_CANDIDATES = 3


def parse_time_of_day(value: str) -> tuple[int, int]:
    """
    Parse an "HH:MM" 24h string.

    Args:
        value: Time of day, e.g. "07:30" or "7:30".

    Returns:
        (hour, minute) tuple.

    Raises:
        ConfigError: If the string is malformed or out of range.
    """
    match = _TIME_OF_DAY.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ConfigError(f"Invalid time of day '{value}': expected HH:MM", field="time")

    hour, minute = int(match.group(1)), int(match.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ConfigError(f"Invalid time of day '{value}': out of range", field="time")
    return hour, minute


def resolve_timezone(name: str) -> ZoneInfo:
    """
    Resolve an IANA timezone name.

    Raises:
        ConfigError: If the name is not a known timezone.
    """
    if not isinstance(name, str) or not name.strip():
        raise ConfigError("Timezone must be a non-empty IANA name", field="timezone")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise ConfigError(f"Unknown timezone '{name}'", field="timezone") from e


def daily_cron_expression(hour: int, minute: int) -> str:
    """Cron expression firing every day at hour:minute."""
    return f"{minute} {hour} * * *"


def next_fire_at(time_of_day: str, timezone: str, now: datetime) -> datetime:
    """
    Compute the next fire instant strictly after `now`.

    Args:
        time_of_day: Local wall-clock time, "HH:MM".
        timezone: IANA timezone name the wall-clock time is expressed in.
        now: Current instant (must be timezone aware).

    Returns:
        Timezone-aware UTC datetime of the next fire.

    Raises:
        ConfigError: On a malformed time or unknown timezone.
        ValueError: If `now` is naive.
    """
    if now.tzinfo is None or now.utcoffset() is None:
        raise ValueError("now must be timezone aware")

    hour, minute = parse_time_of_day(time_of_day)
    zone = resolve_timezone(timezone)

    # Candidates are generated in naive local wall-clock time, then resolved.
    local_now = now.astimezone(zone).replace(tzinfo=None, fold=0)
    cron = croniter(daily_cron_expression(hour, minute), local_now)

    for _ in range(_MAX_CANDIDATES):
        candidate = cron.get_next(datetime)
        instant = resolve_local_time(candidate, zone)
        if instant > now:
            return instant

    raise RuntimeError(f"No fire time found for {time_of_day} in {timezone} after {now}")


def resolve_local_time(wall_time: datetime, zone: ZoneInfo) -> datetime:
    """
    Map a naive local wall-clock time to a UTC instant.

    Ambiguous times resolve to their first occurrence. Nonexistent times
    resolve to the end of the gap they fall into.

    Args:
        wall_time: Naive local datetime.
        zone: Timezone the wall time is expressed in.

    Returns:
        Timezone-aware UTC datetime.
    """
    first = wall_time.replace(tzinfo=zone, fold=0)
    instant = first.astimezone(UTC)

    if instant.astimezone(zone).replace(tzinfo=None) == wall_time:
        return instant

    # Inside a gap: fold=0 uses the pre-transition offset, fold=1 the
    # post-transition one. The transition lies between the two instants.
    other = wall_time.replace(tzinfo=zone, fold=1).astimezone(UTC)
    return _find_transition(min(instant, other), max(instant, other), zone)


def _find_transition(low: datetime, high: datetime, zone: ZoneInfo) -> datetime:
    """Binary search for the first instant in [low, high] using high's UTC offset."""
    target_offset = high.astimezone(zone).utcoffset()
    lo, hi = 0, int((high - low).total_seconds())

    while lo < hi:
        mid = (lo + hi) // 2
        if (low + timedelta(seconds=mid)).astimezone(zone).utcoffset() == target_offset:
            hi = mid
        else:
            lo = mid + 1

    return low + timedelta(seconds=lo)
