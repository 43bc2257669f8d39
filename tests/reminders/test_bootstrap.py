"""Tests for BootstrapLoader."""

import logging

import pytest

from reminder_engine.errors import BootstrapError
from reminder_engine.reminders.domain.policy import ReminderPolicy
from reminder_engine.reminders.domain.user_account import StoredPolicy
from reminder_engine.reminders.infrastructure.bootstrap import BootstrapLoader, BootstrapResult
from reminder_engine.reminders.infrastructure.clock import ManualClock
from reminder_engine.reminders.infrastructure.in_memory_store import InMemoryPolicyStore
from reminder_engine.reminders.infrastructure.registry import ReminderRegistry
from tests.fakes import RecordingFire, StaticStore


@pytest.fixture
def registry(clock: ManualClock) -> ReminderRegistry:
    return ReminderRegistry(RecordingFire(), clock)


def enabled(time: str = "20:00", timezone: str = "UTC") -> ReminderPolicy:
    return ReminderPolicy(enabled=True, time=time, timezone=timezone)


@pytest.mark.unit
@pytest.mark.asyncio
class TestBootstrapLoader:
    """Test suite for BootstrapLoader."""

    async def test_loads_every_enabled_policy(self, registry: ReminderRegistry) -> None:
        """Test that every valid enabled policy is scheduled."""
        store = InMemoryPolicyStore()
        for i in range(5):
            store.add_account(f"user-{i}", f"user-{i}@example.com", f"User {i}", enabled())
        store.add_account("off", "off@example.com", "Off", ReminderPolicy(enabled=False))

        result = await BootstrapLoader(store, registry).initialize_all()

        assert result.loaded == 5
        assert result.skipped == []
        assert set(registry.get_jobs()) == {f"user-{i}" for i in range(5)}

    async def test_bad_timezone_skips_one_user(
        self, registry: ReminderRegistry, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that one unknown timezone among ten policies skips only that user."""
        store = InMemoryPolicyStore()
        for i in range(10):
            timezone = "Mars/Olympus_Mons" if i == 3 else "Europe/Berlin"
            store.add_account(
                f"user-{i}",
                f"user-{i}@example.com",
                f"User {i}",
                {"enabled": True, "time": "20:00", "timezone": timezone},
            )

        with caplog.at_level(logging.WARNING):
            result = await BootstrapLoader(store, registry).initialize_all()

        assert result.loaded == 9
        assert result.skipped == ["user-3"]
        assert not registry.contains("user-3")
        assert "Skipping reminder for user 'user-3'" in caplog.text

    async def test_malformed_documents_are_skipped(self, registry: ReminderRegistry) -> None:
        """Test that bad times and wrongly typed fields are skipped."""
        store = StaticStore(
            [
                StoredPolicy("good", enabled()),
                StoredPolicy("bad-time", {"enabled": True, "time": "25:61"}),
                StoredPolicy("bad-type", {"enabled": True, "time": 2000}),
            ]
        )

        result = await BootstrapLoader(store, registry).initialize_all()

        assert result.loaded == 1
        assert result.skipped == ["bad-time", "bad-type"]

    async def test_disabled_records_are_ignored(self, registry: ReminderRegistry) -> None:
        """Test that a disabled record is neither loaded nor skipped."""
        store = StaticStore(
            [StoredPolicy("good", enabled()), StoredPolicy("off", ReminderPolicy(enabled=False))]
        )

        result = await BootstrapLoader(store, registry).initialize_all()

        assert result.to_dict() == {"loaded": 1, "skipped": []}
        assert not registry.contains("off")

    async def test_empty_store(self, registry: ReminderRegistry) -> None:
        """Test bootstrapping with no enabled users."""
        result = await BootstrapLoader(StaticStore([]), registry).initialize_all()
        assert result == BootstrapResult(loaded=0, skipped=[])

    async def test_store_failure_raises(self, registry: ReminderRegistry) -> None:
        """Test that an unreadable store raises BootstrapError."""
        store = InMemoryPolicyStore()
        store.fail_reads = ConnectionError("database unavailable")

        with pytest.raises(BootstrapError, match="database unavailable") as exc_info:
            await BootstrapLoader(store, registry).initialize_all()

        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert registry.get_jobs() == {}

    async def test_store_timeout_raises(self, registry: ReminderRegistry) -> None:
        """Test that a store slower than the timeout raises BootstrapError."""
        store = StaticStore([StoredPolicy("good", enabled())], delay=5)

        with pytest.raises(BootstrapError, match="Timed out"):
            await BootstrapLoader(store, registry, timeout_seconds=0.05).initialize_all()

    async def test_rerun_replaces_jobs(self, registry: ReminderRegistry) -> None:
        """Test that bootstrapping twice leaves one job per user."""
        store = StaticStore([StoredPolicy("good", enabled())])
        loader = BootstrapLoader(store, registry)

        await loader.initialize_all()
        await loader.initialize_all()

        assert list(registry.get_jobs()) == ["good"]
