"""Infrastructure layer for the event system."""

from reminder_engine.event_system.infrastructure.in_memory_broker import InMemoryBroker
from reminder_engine.event_system.infrastructure.in_memory_consumer import InMemoryConsumer
from reminder_engine.event_system.infrastructure.in_memory_publisher import InMemoryPublisher

__all__ = ["InMemoryBroker", "InMemoryPublisher", "InMemoryConsumer"]
