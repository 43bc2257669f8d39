"""Per-user daily reminders: trigger calculation, registry, decisions, bootstrap."""

from reminder_engine.reminders.domain import (
    NOTIFICATION_TOPIC,
    ActivityOraclePort,
    ClockPort,
    DispatcherPort,
    JobHandle,
    NotificationEvent,
    NotificationKind,
    PolicyStorePort,
    ReminderPolicy,
    ReminderSchedulerPort,
    ScheduledJob,
    StoredPolicy,
    UserAccount,
    next_fire_at,
)
from reminder_engine.reminders.infrastructure import (
    BootstrapLoader,
    BootstrapResult,
    DecisionEngine,
    InMemoryActivityOracle,
    InMemoryPolicyStore,
    LoggingDispatcher,
    ManualClock,
    ReminderRegistry,
    ReminderService,
    SystemClock,
)

__all__ = [
    # Domain
    "ReminderPolicy",
    "ScheduledJob",
    "JobHandle",
    "NotificationEvent",
    "NotificationKind",
    "NOTIFICATION_TOPIC",
    "UserAccount",
    "StoredPolicy",
    "next_fire_at",
    "ActivityOraclePort",
    "DispatcherPort",
    "PolicyStorePort",
    "ClockPort",
    "ReminderSchedulerPort",
    # Infrastructure
    "ReminderRegistry",
    "ReminderService",
    "DecisionEngine",
    "BootstrapLoader",
    "BootstrapResult",
    "SystemClock",
    "ManualClock",
    "InMemoryPolicyStore",
    "InMemoryActivityOracle",
    "LoggingDispatcher",
]
