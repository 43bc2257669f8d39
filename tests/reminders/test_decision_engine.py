"""Tests for DecisionEngine."""

import logging
from datetime import UTC, datetime

import pytest

from reminder_engine.event_system.domain.events import EventBase
from reminder_engine.event_system.domain.publisher_port import PublisherPort
from reminder_engine.event_system.infrastructure.in_memory_consumer import InMemoryConsumer
from reminder_engine.reminders.domain.notification_event import (
    NOTIFICATION_TOPIC,
    NotificationKind,
)
from reminder_engine.reminders.domain.policy import ReminderPolicy
from reminder_engine.reminders.domain.user_account import UserAccount
from reminder_engine.reminders.infrastructure.clock import ManualClock
from reminder_engine.reminders.infrastructure.decision_engine import DecisionEngine
from reminder_engine.reminders.infrastructure.in_memory_oracle import InMemoryActivityOracle
from reminder_engine.reminders.infrastructure.in_memory_store import InMemoryPolicyStore
from reminder_engine.reminders.infrastructure.logging_dispatcher import (
    STANDARD_SUBJECT,
    LoggingDispatcher,
)
from tests.fakes import (
    FailingDispatcher,
    FailingOracle,
    SlowDispatcher,
    SlowOracle,
    StreakFailingOracle,
    WriteFailingStore,
)

EARLIER = datetime(2026, 2, 28, 20, tzinfo=UTC)


async def load(store: InMemoryPolicyStore, user_id: str = "alice") -> UserAccount:
    account = await store.get_account(user_id)
    assert account is not None
    return account


@pytest.mark.unit
@pytest.mark.asyncio
class TestDecision:
    """Skipped / StreakProtection / Standard selection."""

    async def test_skipped_when_already_acted(
        self,
        engine: DecisionEngine,
        store: InMemoryPolicyStore,
        oracle: InMemoryActivityOracle,
        dispatcher: LoggingDispatcher,
    ) -> None:
        """Test that nothing is sent or written when the user acted today."""
        oracle.record_activity("alice")

        event = await engine.evaluate(await load(store))

        assert event.kind == NotificationKind.SKIPPED
        assert not event.delivered
        assert not event.failed
        assert dispatcher.sent == []
        assert "alice" not in store.last_notified

    async def test_streak_protection(
        self,
        engine: DecisionEngine,
        store: InMemoryPolicyStore,
        oracle: InMemoryActivityOracle,
        dispatcher: LoggingDispatcher,
        clock: ManualClock,
    ) -> None:
        """Test that a live streak with protection on sends the streak reminder."""
        oracle.set_streak("alice", 12)

        event = await engine.evaluate(await load(store))

        assert event.kind == NotificationKind.STREAK_PROTECTION
        assert event.streak_count == 12
        assert event.delivered
        assert len(dispatcher.sent) == 1
        assert dispatcher.sent[0].subject == "Don't break your 12-day streak!"
        assert dispatcher.sent[0].contact == "alice@example.com"
        assert store.last_notified["alice"] == clock.now()

    async def test_standard_without_streak(
        self,
        engine: DecisionEngine,
        store: InMemoryPolicyStore,
        dispatcher: LoggingDispatcher,
        clock: ManualClock,
    ) -> None:
        """Test that a zero streak sends the standard reminder."""
        event = await engine.evaluate(await load(store))

        assert event.kind == NotificationKind.STANDARD
        assert event.streak_count is None
        assert event.delivered
        assert dispatcher.sent[0].subject == STANDARD_SUBJECT
        assert dispatcher.sent[0].display_name == "Alice"
        assert store.last_notified["alice"] == clock.now()

    async def test_standard_when_protection_off(
        self,
        engine: DecisionEngine,
        store: InMemoryPolicyStore,
        oracle: InMemoryActivityOracle,
        dispatcher: LoggingDispatcher,
    ) -> None:
        """Test that streak protection off sends the standard reminder despite a streak."""
        store.set_policy("alice", ReminderPolicy(enabled=True, streak_protection=False))
        oracle.set_streak("alice", 5)

        event = await engine.evaluate(await load(store))

        assert event.kind == NotificationKind.STANDARD
        assert event.streak_count is None
        assert dispatcher.sent[0].subject == STANDARD_SUBJECT

    async def test_policy_snapshot_overrides_account(
        self,
        engine: DecisionEngine,
        store: InMemoryPolicyStore,
        oracle: InMemoryActivityOracle,
    ) -> None:
        """Test that an explicit policy is used instead of the account's."""
        oracle.set_streak("alice", 3)
        snapshot = ReminderPolicy(enabled=True, streak_protection=False)

        event = await engine.evaluate(await load(store), snapshot)

        assert event.kind == NotificationKind.STANDARD

    async def test_fired_at_from_clock(
        self, engine: DecisionEngine, store: InMemoryPolicyStore, clock: ManualClock
    ) -> None:
        """Test that the event carries the clock's time."""
        event = await engine.evaluate(await load(store))
        assert event.fired_at == clock.now()
        assert event.user_id == "alice"

    async def test_fired_at_passed_through(
        self, engine: DecisionEngine, store: InMemoryPolicyStore, clock: ManualClock
    ) -> None:
        """Test that an explicit fire instant is stamped instead of the clock's time."""
        event = await engine.evaluate(await load(store), fired_at=EARLIER)

        assert event.fired_at == EARLIER
        assert store.last_notified["alice"] == clock.now()


@pytest.mark.unit
@pytest.mark.asyncio
class TestFailures:
    """Collaborator failures never escape evaluate()."""

    async def test_dispatch_failure_leaves_last_notified(
        self,
        store: InMemoryPolicyStore,
        oracle: InMemoryActivityOracle,
        clock: ManualClock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that a failed send is logged and lastNotified is unchanged."""
        store.last_notified["alice"] = EARLIER
        dispatcher = FailingDispatcher()
        engine = DecisionEngine(oracle, dispatcher, store, clock, timeout_seconds=0.2)

        with caplog.at_level(logging.ERROR):
            event = await engine.evaluate(await load(store))

        assert dispatcher.attempts == 1
        assert event.kind == NotificationKind.STANDARD
        assert not event.delivered
        assert event.failed
        assert event.error is not None and "smtp connection refused" in event.error
        assert store.last_notified["alice"] == EARLIER
        assert "Failed to send" in caplog.text

    async def test_dispatch_failure_does_not_retry(
        self, store: InMemoryPolicyStore, oracle: InMemoryActivityOracle, clock: ManualClock
    ) -> None:
        """Test that a failed streak reminder is attempted exactly once."""
        oracle.set_streak("alice", 4)
        dispatcher = FailingDispatcher()
        engine = DecisionEngine(oracle, dispatcher, store, clock, timeout_seconds=0.2)

        event = await engine.evaluate(await load(store))

        assert event.kind == NotificationKind.STREAK_PROTECTION
        assert dispatcher.attempts == 1

    async def test_dispatch_timeout(
        self, store: InMemoryPolicyStore, oracle: InMemoryActivityOracle, clock: ManualClock
    ) -> None:
        """Test that a hung dispatcher is abandoned after the timeout."""
        engine = DecisionEngine(oracle, SlowDispatcher(), store, clock, timeout_seconds=0.05)

        event = await engine.evaluate(await load(store))

        assert not event.delivered
        assert event.error is not None and "timed out" in event.error
        assert "alice" not in store.last_notified

    async def test_oracle_failure_sends_standard(
        self,
        store: InMemoryPolicyStore,
        dispatcher: LoggingDispatcher,
        clock: ManualClock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that an unreachable oracle is treated as 'not acted' and degrades."""
        engine = DecisionEngine(FailingOracle(), dispatcher, store, clock, timeout_seconds=0.2)

        with caplog.at_level(logging.WARNING):
            event = await engine.evaluate(await load(store))

        assert event.kind == NotificationKind.STANDARD
        assert event.delivered
        assert event.degraded
        assert len(dispatcher.sent) == 1
        assert "Activity check failed" in caplog.text

    async def test_streak_failure_sends_standard(
        self, store: InMemoryPolicyStore, dispatcher: LoggingDispatcher, clock: ManualClock
    ) -> None:
        """Test that a failed streak lookup falls back to the standard reminder."""
        engine = DecisionEngine(
            StreakFailingOracle(), dispatcher, store, clock, timeout_seconds=0.2
        )

        event = await engine.evaluate(await load(store))

        assert event.kind == NotificationKind.STANDARD
        assert event.degraded
        assert dispatcher.sent[0].subject == STANDARD_SUBJECT

    async def test_oracle_timeout(
        self, store: InMemoryPolicyStore, dispatcher: LoggingDispatcher, clock: ManualClock
    ) -> None:
        """Test that a hung oracle is abandoned after the timeout."""
        engine = DecisionEngine(SlowOracle(), dispatcher, store, clock, timeout_seconds=0.05)

        event = await engine.evaluate(await load(store))

        assert event.degraded
        assert event.delivered
        assert event.kind == NotificationKind.STANDARD

    async def test_last_notified_write_failure_is_logged(
        self,
        oracle: InMemoryActivityOracle,
        dispatcher: LoggingDispatcher,
        clock: ManualClock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that a failing write-back does not turn a delivery into a failure."""
        store = WriteFailingStore()
        store.add_account("alice", "alice@example.com", "Alice", ReminderPolicy(enabled=True))
        engine = DecisionEngine(oracle, dispatcher, store, clock, timeout_seconds=0.2)

        with caplog.at_level(logging.ERROR):
            event = await engine.evaluate(await load(store))

        assert event.delivered
        assert "Failed to record lastNotified" in caplog.text

    async def test_rejects_non_positive_timeout(
        self,
        store: InMemoryPolicyStore,
        oracle: InMemoryActivityOracle,
        dispatcher: LoggingDispatcher,
        clock: ManualClock,
    ) -> None:
        """Test that a zero timeout is rejected."""
        with pytest.raises(ValueError):
            DecisionEngine(oracle, dispatcher, store, clock, timeout_seconds=0)


@pytest.mark.unit
@pytest.mark.asyncio
class TestPublishing:
    """NotificationEvents reach the broker."""

    async def test_events_are_published(
        self,
        engine: DecisionEngine,
        store: InMemoryPolicyStore,
        oracle: InMemoryActivityOracle,
        consumer: InMemoryConsumer[EventBase],
    ) -> None:
        """Test that every outcome is published on the notifications topic."""
        oracle.set_streak("alice", 2)
        await engine.evaluate(await load(store))
        oracle.record_activity("alice")
        await engine.evaluate(await load(store))

        published = consumer.drain(NOTIFICATION_TOPIC)

        assert [event.get_field("kind") for event in published] == [
            "streak_protection",
            "skipped",
        ]
        assert published[0].get_field("streak_count") == 2
        assert published[0].get_field("delivered") is True

    async def test_publish_failure_does_not_escape(
        self,
        store: InMemoryPolicyStore,
        oracle: InMemoryActivityOracle,
        dispatcher: LoggingDispatcher,
        clock: ManualClock,
    ) -> None:
        """Test that a broken publisher is logged and ignored."""

        class BrokenPublisher(PublisherPort[EventBase]):
            async def publish(self, event: EventBase) -> None:
                raise RuntimeError("broker down")

        engine = DecisionEngine(
            oracle, dispatcher, store, clock, BrokenPublisher(), timeout_seconds=0.2
        )

        event = await engine.evaluate(await load(store))

        assert event.delivered
