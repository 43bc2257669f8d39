"""In-memory policy store for development, demos and tests."""

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from reminder_engine.reminders.domain.policy import ReminderPolicy, coerce_policy
from reminder_engine.reminders.domain.policy_store_port import PolicyStorePort
from reminder_engine.reminders.domain.user_account import StoredPolicy, UserAccount


class InMemoryPolicyStore(PolicyStorePort):
    """
    Dictionary-backed implementation of the PolicyStorePort.

    Policies may be stored raw (as mappings) to simulate malformed documents
    in a real store; `get_account` coerces them, `list_enabled_policies`
    hands them over as-is.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, tuple[str, str, ReminderPolicy | Mapping[str, Any]]] = {}
        self.last_notified: dict[str, datetime] = {}
        self.fail_reads: Exception | None = None

    def add_account(
        self,
        user_id: str,
        contact: str,
        display_name: str,
        policy: ReminderPolicy | Mapping[str, Any],
    ) -> None:
        """Create or replace an account."""
        self._accounts[user_id] = (contact, display_name, policy)

    def set_policy(self, user_id: str, policy: ReminderPolicy | Mapping[str, Any]) -> None:
        """Replace an existing account's policy."""
        if user_id not in self._accounts:
            raise KeyError(f"Account '{user_id}' not found")
        contact, display_name, _ = self._accounts[user_id]
        self._accounts[user_id] = (contact, display_name, policy)

    async def list_enabled_policies(self) -> list[StoredPolicy]:
        if self.fail_reads is not None:
            raise self.fail_reads

        enabled = []
        for user_id, (_, _, policy) in self._accounts.items():
            is_enabled = (
                policy.enabled
                if isinstance(policy, ReminderPolicy)
                else bool(policy.get("enabled"))
            )
            if is_enabled:
                enabled.append(StoredPolicy(user_id=user_id, policy=policy))
        return enabled

    async def get_account(self, user_id: str) -> UserAccount | None:
        record = self._accounts.get(user_id)
        if record is None:
            return None

        contact, display_name, policy = record
        model = coerce_policy(policy)
        last = self.last_notified.get(user_id)
        if last is not None:
            model = model.model_copy(update={"last_notified": last})
        return UserAccount(
            user_id=user_id, contact=contact, display_name=display_name, policy=model
        )

    async def update_last_notified(self, user_id: str, timestamp: datetime) -> None:
        if user_id not in self._accounts:
            raise KeyError(f"Account '{user_id}' not found")
        self.last_notified[user_id] = timestamp
        logging.debug(f"Recorded lastNotified={timestamp.isoformat()} for user '{user_id}'")
