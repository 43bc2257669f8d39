"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from typing import Any

import pytest

from reminder_engine.config import SchedulerConfig
from reminder_engine.event_system.domain.events import EventBase
from reminder_engine.event_system.infrastructure.in_memory_broker import InMemoryBroker
from reminder_engine.event_system.infrastructure.in_memory_consumer import InMemoryConsumer
from reminder_engine.event_system.infrastructure.in_memory_publisher import InMemoryPublisher
from reminder_engine.reminders.domain.policy import ReminderPolicy
from reminder_engine.reminders.infrastructure.clock import ManualClock
from reminder_engine.reminders.infrastructure.decision_engine import DecisionEngine
from reminder_engine.reminders.infrastructure.in_memory_oracle import InMemoryActivityOracle
from reminder_engine.reminders.infrastructure.in_memory_store import InMemoryPolicyStore
from reminder_engine.reminders.infrastructure.logging_dispatcher import LoggingDispatcher
from reminder_engine.reminders.infrastructure.service import ReminderService

# 2026-03-01 is a Sunday, well away from any DST transition.
START = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class DummyEvent(EventBase):
    """Test event for testing purposes."""

    message: str

    def __init__(self, topic: str = "", message: str = "", **kwargs: Any) -> None:
        super().__init__(topic=topic, message=message, **kwargs)
        self.message = message


class AnotherDummyEvent(EventBase):
    """Another test event for testing purposes."""

    value: int

    def __init__(self, topic: str = "", value: int = 0, **kwargs: Any) -> None:
        super().__init__(topic=topic, value=value, **kwargs)
        self.value = value


@pytest.fixture
def broker() -> InMemoryBroker[EventBase]:
    """Create an in-memory broker instance."""
    return InMemoryBroker()


@pytest.fixture
def publisher(broker: InMemoryBroker[EventBase]) -> InMemoryPublisher[EventBase]:
    """Create an in-memory publisher instance."""
    return InMemoryPublisher(broker)


@pytest.fixture
def consumer(broker: InMemoryBroker[EventBase]) -> InMemoryConsumer[EventBase]:
    """Create an in-memory consumer instance."""
    return InMemoryConsumer(broker)


@pytest.fixture
def test_topic() -> str:
    """Return a test topic name."""
    return "test_topic"


@pytest.fixture
def clock() -> ManualClock:
    """Create a simulated clock at START."""
    return ManualClock(START)


@pytest.fixture
def store() -> InMemoryPolicyStore:
    """Create a store with one enabled user ('alice', 20:00 UTC)."""
    store = InMemoryPolicyStore()
    store.add_account(
        "alice",
        "alice@example.com",
        "Alice",
        ReminderPolicy(enabled=True, time="20:00", timezone="UTC"),
    )
    return store


@pytest.fixture
def oracle() -> InMemoryActivityOracle:
    """Create an empty activity oracle."""
    return InMemoryActivityOracle()


@pytest.fixture
def dispatcher() -> LoggingDispatcher:
    """Create a dispatcher that records what it sends."""
    return LoggingDispatcher()


@pytest.fixture
def config() -> SchedulerConfig:
    """Short timeouts so failure paths finish quickly."""
    return SchedulerConfig(collaborator_timeout_seconds=0.2, store_timeout_seconds=0.2)


@pytest.fixture
def engine(
    store: InMemoryPolicyStore,
    oracle: InMemoryActivityOracle,
    dispatcher: LoggingDispatcher,
    clock: ManualClock,
    publisher: InMemoryPublisher[EventBase],
) -> DecisionEngine:
    """Create a decision engine over the in-memory collaborators."""
    return DecisionEngine(oracle, dispatcher, store, clock, publisher, timeout_seconds=0.2)


@pytest.fixture
def service(
    store: InMemoryPolicyStore,
    oracle: InMemoryActivityOracle,
    dispatcher: LoggingDispatcher,
    clock: ManualClock,
    config: SchedulerConfig,
    publisher: InMemoryPublisher[EventBase],
) -> ReminderService:
    """Create a reminder service on the simulated clock (not started)."""
    return ReminderService(store, oracle, dispatcher, clock, config, publisher)


@pytest.fixture
async def running_service(service: ReminderService) -> AsyncGenerator[ReminderService, None]:
    """Start the service's dispatch loop and stop it after the test."""
    await service.start()
    yield service
    await service.stop()
