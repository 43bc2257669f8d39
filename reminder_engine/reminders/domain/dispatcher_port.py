"""Port for delivering rendered reminder notifications."""

from abc import ABC, abstractmethod


class DispatcherPort(ABC):
    """Abstract port for the notification dispatcher.

    Rendering and transport live behind this port. Any exception raised by
    an implementation is treated as a failed delivery.
    """

    @abstractmethod
    async def send_standard_reminder(self, contact: str, display_name: str) -> None:
        """Send the standard daily reminder.

        Args:
            contact: Delivery address
            display_name: Name used in the greeting
        """
        raise NotImplementedError

    @abstractmethod
    async def send_streak_protection(
        self, contact: str, display_name: str, streak_count: int
    ) -> None:
        """Send a reminder that the user's streak is at risk.

        Args:
            contact: Delivery address
            display_name: Name used in the greeting
            streak_count: Current streak length
        """
        raise NotImplementedError
