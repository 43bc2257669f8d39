"""HTTP integration for the reminder service."""

from reminder_engine.reminders.api.fastapi_integration import (
    ReminderRouter,
    ReminderSettingsPayload,
    create_reminder_router,
)

__all__ = ["ReminderRouter", "ReminderSettingsPayload", "create_reminder_router"]
