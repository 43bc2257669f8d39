"""In-memory event system used to publish notification outcomes."""

from reminder_engine.event_system.domain import (
    BrokerPort,
    CompletedEvent,
    ConsumerPort,
    EventBase,
    EventMeta,
    PublisherPort,
)
from reminder_engine.event_system.infrastructure import (
    InMemoryBroker,
    InMemoryConsumer,
    InMemoryPublisher,
)

__all__ = [
    # Domain
    "EventBase",
    "EventMeta",
    "CompletedEvent",
    "BrokerPort",
    "PublisherPort",
    "ConsumerPort",
    # Infrastructure
    "InMemoryBroker",
    "InMemoryPublisher",
    "InMemoryConsumer",
]
