"""Dispatcher that logs rendered reminders instead of sending them."""

import logging
from dataclasses import dataclass

from reminder_engine.reminders.domain.dispatcher_port import DispatcherPort

STANDARD_SUBJECT = "Time to reflect with Memora"


def streak_subject(streak_count: int) -> str:
    return f"Don't break your {streak_count}-day streak!"


@dataclass(frozen=True)
class SentNotification:
    """A notification the dispatcher accepted."""

    contact: str
    display_name: str
    subject: str
    streak_count: int | None = None


class LoggingDispatcher(DispatcherPort):
    """
    Development dispatcher.
    Logs the subject line each real e-mail would carry and keeps a record.
    """

    def __init__(self) -> None:
        self.sent: list[SentNotification] = []

    async def send_standard_reminder(self, contact: str, display_name: str) -> None:
        self._record(SentNotification(contact, display_name, STANDARD_SUBJECT))

    async def send_streak_protection(
        self, contact: str, display_name: str, streak_count: int
    ) -> None:
        self._record(
            SentNotification(contact, display_name, streak_subject(streak_count), streak_count)
        )

    def _record(self, notification: SentNotification) -> None:
        self.sent.append(notification)
        logging.info(
            f"[reminder] to={notification.contact} name={notification.display_name} "
            f"subject={notification.subject!r}"
        )
