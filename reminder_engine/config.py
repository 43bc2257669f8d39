"""
Runtime configuration for the reminder engine.

Values come from REMINDER_* environment variables when present.
"""

import os

from pydantic import BaseModel, Field


class SchedulerConfig(BaseModel):
    """Tunables for the scheduler service."""

    collaborator_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound for a single oracle, dispatcher or store call",
    )
    store_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound for reading all enabled policies at startup",
    )
    misfire_grace_seconds: float = Field(
        default=3600.0,
        ge=0,
        description="A fire processed later than this is skipped (and rescheduled)",
    )
    max_sleep_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Longest single sleep of the dispatch loop",
    )
    log_level: str = Field(default="INFO", examples=["DEBUG", "INFO", "WARNING"])

    @classmethod
    def from_env(cls) -> "SchedulerConfig":
        """Build a config from REMINDER_* environment variables."""
        env_map = {
            "collaborator_timeout_seconds": "REMINDER_COLLABORATOR_TIMEOUT",
            "store_timeout_seconds": "REMINDER_STORE_TIMEOUT",
            "misfire_grace_seconds": "REMINDER_MISFIRE_GRACE",
            "max_sleep_seconds": "REMINDER_MAX_SLEEP",
            "log_level": "REMINDER_LOG_LEVEL",
        }
        values = {
            field: os.environ[var] for field, var in env_map.items() if os.environ.get(var)
        }
        return cls.model_validate(values)
