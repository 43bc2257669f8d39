"""Startup loader that schedules every enabled policy from the store."""

import asyncio
import logging
from dataclasses import dataclass, field

from reminder_engine.errors import BootstrapError, ConfigError
from reminder_engine.reminders.domain.policy import ReminderPolicy
from reminder_engine.reminders.domain.policy_store_port import PolicyStorePort
from reminder_engine.reminders.infrastructure.registry import ReminderRegistry


@dataclass
class BootstrapResult:
    """Outcome of InitializeAll.

    Attributes:
        loaded: Number of users scheduled
        skipped: User ids whose stored policy was rejected
    """

    loaded: int = 0
    skipped: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {"loaded": self.loaded, "skipped": list(self.skipped)}


class BootstrapLoader:
    """Populates the registry from durable policy state.

    A malformed policy skips that user only; a store that cannot be read
    at all raises BootstrapError.
    """

    def __init__(
        self,
        store: PolicyStorePort,
        registry: ReminderRegistry,
        timeout_seconds: float = 30.0,
    ) -> None:
        self.store = store
        self.registry = registry
        self.timeout_seconds = timeout_seconds

    async def initialize_all(self) -> BootstrapResult:
        """Schedule every enabled policy.

        Returns:
            Count of scheduled users and ids of skipped users

        Raises:
            BootstrapError: If the store read fails or times out
        """
        logging.info("Initializing reminder scheduler...")
        try:
            stored = await asyncio.wait_for(
                self.store.list_enabled_policies(), timeout=self.timeout_seconds
            )
        except TimeoutError as e:
            raise BootstrapError(
                f"Timed out after {self.timeout_seconds}s reading enabled policies"
            ) from e
        except Exception as e:
            raise BootstrapError(f"Could not read enabled policies: {e}") from e

        logging.info(f"Found {len(stored)} users with reminders enabled")

        result = BootstrapResult()
        for record in stored:
            # Disabled records count as neither loaded nor skipped.
            if isinstance(record.policy, ReminderPolicy) and not record.policy.enabled:
                logging.debug(f"Ignoring disabled policy for user '{record.user_id}'")
                continue

            try:
                job = self.registry.upsert(record.user_id, record.policy)
            except ConfigError as e:
                logging.warning(f"Skipping reminder for user '{record.user_id}': {e}")
                result.skipped.append(record.user_id)
                continue

            if job is not None:
                result.loaded += 1

        logging.info(
            f"Reminder scheduler initialized: {result.loaded} loaded, "
            f"{len(result.skipped)} skipped"
        )
        return result
