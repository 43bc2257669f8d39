"""Domain layer for per-user reminders."""

from reminder_engine.reminders.domain.activity_oracle_port import ActivityOraclePort
from reminder_engine.reminders.domain.clock_port import ClockPort
from reminder_engine.reminders.domain.dispatcher_port import DispatcherPort
from reminder_engine.reminders.domain.notification_event import (
    NOTIFICATION_TOPIC,
    NotificationEvent,
    NotificationKind,
)
from reminder_engine.reminders.domain.policy import (
    ReminderPolicy,
    ValidatedSchedule,
    coerce_policy,
    validate_schedule,
)
from reminder_engine.reminders.domain.policy_store_port import PolicyStorePort
from reminder_engine.reminders.domain.scheduled_job import JobHandle, ScheduledJob
from reminder_engine.reminders.domain.scheduler_port import ReminderSchedulerPort
from reminder_engine.reminders.domain.trigger_calculator import (
    next_fire_at,
    parse_time_of_day,
    resolve_local_time,
    resolve_timezone,
)
from reminder_engine.reminders.domain.user_account import StoredPolicy, UserAccount

__all__ = [
    # Policy
    "ReminderPolicy",
    "ValidatedSchedule",
    "coerce_policy",
    "validate_schedule",
    # Trigger calculation
    "next_fire_at",
    "parse_time_of_day",
    "resolve_timezone",
    "resolve_local_time",
    # Jobs and events
    "JobHandle",
    "ScheduledJob",
    "NotificationEvent",
    "NotificationKind",
    "NOTIFICATION_TOPIC",
    "UserAccount",
    "StoredPolicy",
    # Ports
    "ActivityOraclePort",
    "DispatcherPort",
    "PolicyStorePort",
    "ClockPort",
    "ReminderSchedulerPort",
]
