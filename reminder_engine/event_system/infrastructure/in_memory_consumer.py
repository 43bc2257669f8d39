import asyncio
import logging
from collections.abc import AsyncGenerator
from typing import Generic, TypeVar

from reminder_engine.event_system.domain.consumer_port import ConsumerPort
from reminder_engine.event_system.domain.events import CompletedEvent, EventBase
from reminder_engine.event_system.infrastructure.in_memory_broker import InMemoryBroker

E = TypeVar("E", bound=EventBase)


class InMemoryConsumer(ConsumerPort[E], Generic[E]):
    """
    An in-memory, asyncio-based implementation of the ConsumerPort.
    Reads events from an InMemoryBroker.
    """

    def __init__(self, broker: InMemoryBroker[E]) -> None:
        self.broker = broker

    async def consume(self, topic: str) -> AsyncGenerator[E, None]:
        """
        Consumes events from the specified topic as an async generator.
        The stream ends when a CompletedEvent is received.
        """
        while True:
            event = await self.broker.get(topic)
            logging.debug(
                f"Consumed from {topic}: {event.__class__.__name__}(id={event.meta.event_id})"
            )

            if isinstance(event, CompletedEvent):
                logging.info(f"Completed event received on '{topic}', ending stream")
                break

            yield event

    def drain(self, topic: str) -> list[E]:
        """
        Take every event currently queued on a topic.

        Args:
            topic: The topic to drain.

        Returns:
            Queued events in publish order; CompletedEvents are dropped.
        """
        queue = self.broker.queues.get(topic)
        events: list[E] = []
        if queue is None:
            return events
        while True:
            try:
                event = queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            if not isinstance(event, CompletedEvent):
                events.append(event)
        return events
