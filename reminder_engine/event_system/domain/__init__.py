"""Domain layer for the event system."""

from reminder_engine.event_system.domain.broker_port import BrokerPort
from reminder_engine.event_system.domain.consumer_port import ConsumerPort
from reminder_engine.event_system.domain.events import CompletedEvent, EventBase, EventMeta
from reminder_engine.event_system.domain.publisher_port import PublisherPort

__all__ = [
    "EventBase",
    "EventMeta",
    "CompletedEvent",
    "BrokerPort",
    "PublisherPort",
    "ConsumerPort",
]
