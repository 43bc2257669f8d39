"""
Reminder scheduler port.
Defines the operations the surrounding application calls.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from reminder_engine.reminders.domain.notification_event import NotificationEvent
    from reminder_engine.reminders.domain.policy import ReminderPolicy
    from reminder_engine.reminders.domain.scheduled_job import ScheduledJob
    from reminder_engine.reminders.infrastructure.bootstrap import BootstrapResult


class ReminderSchedulerPort(ABC):
    """
    Abstract port for the per-user reminder scheduler.
    """

    @abstractmethod
    def schedule_user_reminder(
        self, user_id: str, policy: ReminderPolicy | Mapping[str, Any]
    ) -> ScheduledJob | None:
        """
        Install, replace or (for a disabled policy) remove a user's reminder.

        Args:
            user_id: User whose reminder changes.
            policy: New policy.

        Returns:
            The installed job, or None if the policy is disabled.

        Raises:
            ConfigError: If the policy is invalid. Any prior job is kept.
        """
        raise NotImplementedError

    @abstractmethod
    def remove_user_reminder(self, user_id: str) -> bool:
        """
        Remove a user's reminder. Idempotent.

        Returns:
            True if a job was removed.
        """
        raise NotImplementedError

    @abstractmethod
    async def initialize_all(self) -> BootstrapResult:
        """
        Schedule every enabled policy from the store. Call once at startup.

        Raises:
            BootstrapError: If the store cannot be read.
        """
        raise NotImplementedError

    @abstractmethod
    async def trigger_now(self, user_id: str) -> NotificationEvent:
        """
        Evaluate a user's reminder immediately, without the timer.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        raise NotImplementedError
