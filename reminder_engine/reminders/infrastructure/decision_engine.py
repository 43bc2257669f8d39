"""
Decision engine.
Runs once per fire: picks Skipped / StreakProtection / Standard, dispatches,
and writes back lastNotified on success.
"""

import asyncio
import logging
from collections.abc import Awaitable
from datetime import datetime
from typing import TypeVar

from reminder_engine.errors import DispatchError, OracleError
from reminder_engine.event_system.domain.publisher_port import PublisherPort
from reminder_engine.reminders.domain.activity_oracle_port import ActivityOraclePort
from reminder_engine.reminders.domain.clock_port import ClockPort
from reminder_engine.reminders.domain.dispatcher_port import DispatcherPort
from reminder_engine.reminders.domain.notification_event import (
    NotificationEvent,
    NotificationKind,
)
from reminder_engine.reminders.domain.policy import ReminderPolicy
from reminder_engine.reminders.domain.policy_store_port import PolicyStorePort
from reminder_engine.reminders.domain.user_account import UserAccount

T = TypeVar("T")


class DecisionEngine:
    """
    Evaluates a user's reminder at fire time.

    Decision order:
        1. User already acted today -> SKIPPED (no dispatch, no store write)
        2. Streak protection on and streak > 0 -> STREAK_PROTECTION
        3. Otherwise -> STANDARD

    Collaborator failures never propagate:
        - Activity oracle failure: assume the user has not acted (a possibly
          redundant reminder beats a missed one); streak failure: streak 0.
        - Dispatch failure: logged, lastNotified left unchanged.
        - lastNotified write failure: logged.

    Every collaborator call is bounded by `timeout_seconds`.
    """

    def __init__(
        self,
        oracle: ActivityOraclePort,
        dispatcher: DispatcherPort,
        store: PolicyStorePort,
        clock: ClockPort,
        publisher: PublisherPort[NotificationEvent] | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        """
        Initialize the decision engine.

        Args:
            oracle: Answers has-acted-today and current-streak questions.
            dispatcher: Delivers the chosen notification.
            store: Receives the lastNotified write-back.
            clock: Source of fire and delivery timestamps.
            publisher: Optional sink for NotificationEvents.
            timeout_seconds: Upper bound for each collaborator call.
        """
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.oracle = oracle
        self.dispatcher = dispatcher
        self.store = store
        self.clock = clock
        self.publisher = publisher
        self.timeout_seconds = timeout_seconds

    async def evaluate(
        self,
        account: UserAccount,
        policy: ReminderPolicy | None = None,
        fired_at: datetime | None = None,
    ) -> NotificationEvent:
        """
        Run one decision for a user.

        Args:
            account: Recipient account (contact, display name, current policy).
            policy: Policy snapshot to decide with; defaults to account.policy.
            fired_at: Instant the reminder fired; defaults to the clock's now.

        Returns:
            The NotificationEvent describing what happened.
        """
        policy = policy or account.policy
        user_id = account.user_id
        fired_at = fired_at or self.clock.now()
        degraded = False

        try:
            acted = await self._call_oracle(self.oracle.has_acted_today(user_id))
        except OracleError as e:
            logging.warning(
                f"Activity check failed for user '{user_id}', sending reminder anyway: {e}"
            )
            acted = False
            degraded = True

        if acted:
            logging.info(f"User '{user_id}' has already acted today, skipping reminder")
            event = NotificationEvent(user_id, NotificationKind.SKIPPED, fired_at)
            await self._publish(event)
            return event

        streak = 0
        if policy.streak_protection:
            try:
                streak = await self._call_oracle(self.oracle.current_streak(user_id))
            except OracleError as e:
                logging.warning(
                    f"Streak lookup failed for user '{user_id}', sending standard reminder: {e}"
                )
                degraded = True

        if policy.streak_protection and streak > 0:
            kind = NotificationKind.STREAK_PROTECTION
            send = self.dispatcher.send_streak_protection(
                account.contact, account.display_name, streak
            )
        else:
            kind = NotificationKind.STANDARD
            streak = 0
            send = self.dispatcher.send_standard_reminder(account.contact, account.display_name)

        try:
            await self._call_dispatcher(send)
        except DispatchError as e:
            logging.error(f"Failed to send {kind} reminder to user '{user_id}': {e}")
            event = NotificationEvent(
                user_id,
                kind,
                fired_at,
                streak_count=streak or None,
                delivered=False,
                error=str(e),
                degraded=degraded,
            )
            await self._publish(event)
            return event

        logging.info(f"Sent {kind} reminder to user '{user_id}'")
        await self._record_delivery(user_id)

        event = NotificationEvent(
            user_id,
            kind,
            fired_at,
            streak_count=streak or None,
            delivered=True,
            degraded=degraded,
        )
        await self._publish(event)
        return event

    async def _call_oracle(self, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.timeout_seconds)
        except TimeoutError as e:
            raise OracleError(f"activity oracle timed out after {self.timeout_seconds}s") from e
        except OracleError:
            raise
        except Exception as e:
            raise OracleError(str(e) or e.__class__.__name__) from e

    async def _call_dispatcher(self, call: Awaitable[None]) -> None:
        try:
            await asyncio.wait_for(call, timeout=self.timeout_seconds)
        except TimeoutError as e:
            raise DispatchError(f"dispatcher timed out after {self.timeout_seconds}s") from e
        except DispatchError:
            raise
        except Exception as e:
            raise DispatchError(str(e) or e.__class__.__name__) from e

    async def _record_delivery(self, user_id: str) -> None:
        delivered_at = self.clock.now()
        try:
            await asyncio.wait_for(
                self.store.update_last_notified(user_id, delivered_at),
                timeout=self.timeout_seconds,
            )
        except Exception as e:
            logging.error(f"Failed to record lastNotified for user '{user_id}': {e}")

    async def _publish(self, event: NotificationEvent) -> None:
        if self.publisher is None:
            return
        try:
            await self.publisher.publish(event)
        except Exception as e:
            logging.error(f"Failed to publish {event}: {e}")
