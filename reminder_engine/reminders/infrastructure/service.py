"""
Reminder service.
Wires the registry, decision engine and bootstrap loader behind the
operations the surrounding application calls.
"""

import asyncio
import logging
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any

from reminder_engine.config import SchedulerConfig
from reminder_engine.errors import ConfigError, StoreError, UserNotFoundError
from reminder_engine.event_system.domain.publisher_port import PublisherPort
from reminder_engine.reminders.domain.activity_oracle_port import ActivityOraclePort
from reminder_engine.reminders.domain.clock_port import ClockPort
from reminder_engine.reminders.domain.dispatcher_port import DispatcherPort
from reminder_engine.reminders.domain.notification_event import NotificationEvent
from reminder_engine.reminders.domain.policy import ReminderPolicy
from reminder_engine.reminders.domain.policy_store_port import PolicyStorePort
from reminder_engine.reminders.domain.scheduled_job import ScheduledJob
from reminder_engine.reminders.domain.scheduler_port import ReminderSchedulerPort
from reminder_engine.reminders.infrastructure.bootstrap import BootstrapLoader, BootstrapResult
from reminder_engine.reminders.infrastructure.clock import SystemClock
from reminder_engine.reminders.infrastructure.decision_engine import DecisionEngine
from reminder_engine.reminders.infrastructure.registry import ReminderRegistry


class ReminderService(ReminderSchedulerPort):
    """
    Per-user daily reminder scheduler.

    Construct one instance at process start and pass it to whatever handles
    settings updates. Running two instances against the same store would
    double-fire and is not supported.

    Example:
        service = ReminderService(store, oracle, dispatcher)
        await service.start()
        await service.initialize_all()

        # On a settings update:
        service.schedule_user_reminder(user_id, {"enabled": True, "time": "21:00",
                                                 "timezone": "Europe/Berlin",
                                                 "streakProtection": True})

        # On shutdown:
        await service.stop()
    """

    def __init__(
        self,
        store: PolicyStorePort,
        oracle: ActivityOraclePort,
        dispatcher: DispatcherPort,
        clock: ClockPort | None = None,
        config: SchedulerConfig | None = None,
        publisher: PublisherPort[NotificationEvent] | None = None,
    ) -> None:
        self.config = config or SchedulerConfig()
        self.clock = clock or SystemClock(self.config.max_sleep_seconds)
        self.store = store

        self.decision_engine = DecisionEngine(
            oracle=oracle,
            dispatcher=dispatcher,
            store=store,
            clock=self.clock,
            publisher=publisher,
            timeout_seconds=self.config.collaborator_timeout_seconds,
        )
        self.registry = ReminderRegistry(
            on_fire=self._handle_fire,
            clock=self.clock,
            misfire_grace=timedelta(seconds=self.config.misfire_grace_seconds),
        )
        self.bootstrap_loader = BootstrapLoader(
            store=store,
            registry=self.registry,
            timeout_seconds=self.config.store_timeout_seconds,
        )

    async def start(self) -> None:
        """Start the dispatch loop."""
        await self.registry.start()

    async def stop(self) -> None:
        """Stop the dispatch loop and wait for in-flight reminders."""
        await self.registry.stop()

    def is_running(self) -> bool:
        return self.registry.is_running()

    def schedule_user_reminder(
        self, user_id: str, policy: ReminderPolicy | Mapping[str, Any]
    ) -> ScheduledJob | None:
        return self.registry.upsert(user_id, policy)

    def remove_user_reminder(self, user_id: str) -> bool:
        return self.registry.remove(user_id)

    async def initialize_all(self) -> BootstrapResult:
        return await self.bootstrap_loader.initialize_all()

    async def trigger_now(self, user_id: str) -> NotificationEvent:
        """
        Run the decision path for a user right now, using their current policy.

        Same Skipped / Standard / StreakProtection semantics as a timed fire.
        Works whether or not the user's reminder is enabled or scheduled.

        Raises:
            UserNotFoundError: If the store has no such account.
            ConfigError: If the stored policy document is malformed.
            StoreError: If the store fails or times out loading the account.
        """
        try:
            account = await asyncio.wait_for(
                self.store.get_account(user_id),
                timeout=self.config.collaborator_timeout_seconds,
            )
        except ConfigError:
            raise
        except TimeoutError as e:
            raise StoreError(f"Timed out loading account for user '{user_id}'") from e
        except Exception as e:
            raise StoreError(f"Could not load account for user '{user_id}': {e}") from e
        if account is None:
            raise UserNotFoundError(user_id)

        logging.info(f"Manual reminder trigger for user '{user_id}'")
        return await self.decision_engine.evaluate(account)

    def contains(self, user_id: str) -> bool:
        return self.registry.contains(user_id)

    def get_job(self, user_id: str) -> ScheduledJob | None:
        return self.registry.get_job(user_id)

    async def _handle_fire(
        self, user_id: str, policy: ReminderPolicy, fired_at: datetime
    ) -> NotificationEvent | None:
        """Fire callback: load the recipient and evaluate with the job's policy."""
        logging.info(f"Running scheduled reminder for user '{user_id}' ({fired_at.isoformat()})")
        try:
            account = await asyncio.wait_for(
                self.store.get_account(user_id),
                timeout=self.config.collaborator_timeout_seconds,
            )
        except Exception as e:
            logging.error(f"Could not load account for user '{user_id}', skipping reminder: {e}")
            return None

        if account is None:
            logging.warning(f"User '{user_id}' not found, skipping reminder")
            return None

        return await self.decision_engine.evaluate(account, policy, fired_at)
