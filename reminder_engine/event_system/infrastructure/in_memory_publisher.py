import logging
from typing import Generic, TypeVar

from reminder_engine.event_system.domain.broker_port import BrokerPort
from reminder_engine.event_system.domain.events import EventBase
from reminder_engine.event_system.domain.publisher_port import PublisherPort

E = TypeVar("E", bound=EventBase)


class InMemoryPublisher(PublisherPort[E], Generic[E]):
    """
    An in-memory implementation of the PublisherPort.
    Routes each event to the topic in its metadata through a broker.
    """

    def __init__(self, broker: BrokerPort[E]):
        self.broker = broker

    async def publish(self, event: E) -> None:
        topic = event.meta.topic
        if not topic:
            raise ValueError(f"Cannot publish {event}: event has no topic")
        self.broker.publish(topic, event)
        logging.debug(f"Published to {topic}: {event.__class__.__name__}(id={event.meta.event_id})")
