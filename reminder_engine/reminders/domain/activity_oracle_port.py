"""Port for answering activity and streak questions about a user."""

from abc import ABC, abstractmethod


class ActivityOraclePort(ABC):
    """Abstract port for the activity oracle.

    Implementations may be slow or fail; callers bound every call with a
    timeout and treat failures as OracleError.
    """

    @abstractmethod
    async def has_acted_today(self, user_id: str) -> bool:
        """Check whether the user already completed today's tracked action.

        Args:
            user_id: User to check

        Returns:
            True if the user has acted today
        """
        raise NotImplementedError

    @abstractmethod
    async def current_streak(self, user_id: str) -> int:
        """Get the number of consecutive days the user has acted.

        Args:
            user_id: User to check

        Returns:
            Current streak count, 0 if none
        """
        raise NotImplementedError
