"""Account records read from the policy store."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from reminder_engine.reminders.domain.policy import ReminderPolicy


@dataclass(frozen=True)
class UserAccount:
    """The parts of a user account the reminder engine needs.

    Attributes:
        user_id: Account identifier
        contact: Address the dispatcher delivers to (e-mail)
        display_name: Name used in the notification greeting
        policy: Current reminder policy
    """

    user_id: str
    contact: str
    display_name: str
    policy: ReminderPolicy


@dataclass(frozen=True)
class StoredPolicy:
    """One element of PolicyStorePort.list_enabled_policies().

    `policy` may be a raw mapping when the stored document has not been
    validated; the registry coerces and validates it on upsert.
    """

    user_id: str
    policy: ReminderPolicy | Mapping[str, Any]
