"""Infrastructure layer for per-user reminders."""

from reminder_engine.reminders.infrastructure.bootstrap import BootstrapLoader, BootstrapResult
from reminder_engine.reminders.infrastructure.clock import ManualClock, SystemClock
from reminder_engine.reminders.infrastructure.decision_engine import DecisionEngine
from reminder_engine.reminders.infrastructure.in_memory_oracle import InMemoryActivityOracle
from reminder_engine.reminders.infrastructure.in_memory_store import InMemoryPolicyStore
from reminder_engine.reminders.infrastructure.logging_dispatcher import (
    LoggingDispatcher,
    SentNotification,
)
from reminder_engine.reminders.infrastructure.registry import ReminderRegistry
from reminder_engine.reminders.infrastructure.service import ReminderService

__all__ = [
    # Scheduling
    "ReminderRegistry",
    "ReminderService",
    "BootstrapLoader",
    "BootstrapResult",
    "DecisionEngine",
    # Clocks
    "SystemClock",
    "ManualClock",
    # Development adapters
    "InMemoryPolicyStore",
    "InMemoryActivityOracle",
    "LoggingDispatcher",
    "SentNotification",
]
