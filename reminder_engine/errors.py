"""
Error taxonomy for the reminder engine.

ConfigError is raised to callers (settings updates, bootstrap, manual
triggers). StoreError is raised by manual triggers when the account cannot
be loaded. The other errors are mostly raised and caught inside
infrastructure boundaries and end up logged or recorded on a
NotificationEvent.
"""


class ReminderError(Exception):
    """Base class for all reminder engine errors."""


class ConfigError(ReminderError, ValueError):
    """A reminder policy has a malformed time or an unknown timezone."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class DispatchError(ReminderError):
    """The dispatcher failed to deliver a notification."""


class OracleError(ReminderError):
    """The activity oracle was unreachable or timed out."""


class BootstrapError(ReminderError):
    """The policy store could not be read, so nothing could be scheduled."""


class StoreError(ReminderError):
    """The policy store failed or timed out while loading an account."""


class UserNotFoundError(ReminderError, LookupError):
    """No account exists for the requested user id."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User '{user_id}' not found")
        self.user_id = user_id
