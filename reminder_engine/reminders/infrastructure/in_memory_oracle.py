"""In-memory activity oracle."""

from reminder_engine.reminders.domain.activity_oracle_port import ActivityOraclePort


class InMemoryActivityOracle(ActivityOraclePort):
    """
    Tracks "acted today" and streak counts in dictionaries.

    The surrounding application calls `record_activity` when a user performs
    the tracked action and `reset_day` at the day boundary.
    """

    def __init__(self) -> None:
        self._acted_today: set[str] = set()
        self._streaks: dict[str, int] = {}

    def record_activity(self, user_id: str) -> None:
        """Mark the user as having acted today and extend their streak once per day."""
        if user_id not in self._acted_today:
            self._acted_today.add(user_id)
            self._streaks[user_id] = self._streaks.get(user_id, 0) + 1

    def set_streak(self, user_id: str, count: int) -> None:
        if count < 0:
            raise ValueError("streak count must be non-negative")
        self._streaks[user_id] = count

    def reset_day(self) -> None:
        """Start a new day. Users who did not act lose their streak."""
        for user_id in list(self._streaks):
            if user_id not in self._acted_today:
                self._streaks[user_id] = 0
        self._acted_today.clear()

    async def has_acted_today(self, user_id: str) -> bool:
        return user_id in self._acted_today

    async def current_streak(self, user_id: str) -> int:
        return self._streaks.get(user_id, 0)
