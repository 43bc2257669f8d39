"""Port for the durable store that owns reminder policies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from reminder_engine.reminders.domain.user_account import StoredPolicy, UserAccount


class PolicyStorePort(ABC):
    """Abstract port for reading policies and writing back lastNotified.

    The reminder engine only reads policies and accounts; the single field
    it writes is the policy's lastNotified timestamp.
    """

    @abstractmethod
    async def list_enabled_policies(self) -> list[StoredPolicy]:
        """List every account whose reminder policy is enabled.

        Returns:
            One StoredPolicy per enabled account
        """
        raise NotImplementedError

    @abstractmethod
    async def get_account(self, user_id: str) -> UserAccount | None:
        """Load one account with its current policy.

        Args:
            user_id: Account identifier

        Returns:
            The account if found, None otherwise
        """
        raise NotImplementedError

    @abstractmethod
    async def update_last_notified(self, user_id: str, timestamp: datetime) -> None:
        """Record the time of the last delivered reminder.

        Args:
            user_id: Account identifier
            timestamp: Delivery time (UTC)
        """
        raise NotImplementedError
