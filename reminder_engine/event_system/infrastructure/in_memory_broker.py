import asyncio
import logging
from typing import Generic, TypeVar

from reminder_engine.event_system.domain.broker_port import BrokerPort
from reminder_engine.event_system.domain.events import EventBase

E = TypeVar("E", bound=EventBase)


class InMemoryBroker(BrokerPort[E], Generic[E]):
    """
    An in-memory, asyncio-based implementation of the BrokerPort.

    Each topic is a bounded asyncio.Queue. When a queue is full the oldest
    event is dropped, so a slow or absent consumer never stalls a producer.
    """

    def __init__(self, maxsize: int = 1000) -> None:
        """
        Initialize the broker.

        Args:
            maxsize: Capacity of each topic queue.
        """
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        self._maxsize = maxsize
        self.queues: dict[str, asyncio.Queue[E]] = {}
        self.dropped = 0

    def declare_topic(self, topic: str) -> None:
        """
        Declares a topic, creating its queue if it doesn't exist.

        Args:
            topic: The topic name to declare.
        """
        if topic not in self.queues:
            logging.info(f"Declaring new topic: '{topic}'")
            self.queues[topic] = asyncio.Queue(maxsize=self._maxsize)

    def publish(self, topic: str, event: E) -> None:
        """
        Publish an event to the given topic.

        Args:
            topic: The topic name.
            event: The event to publish.
        """
        self.declare_topic(topic)
        queue = self.queues[topic]
        if queue.full():
            oldest = queue.get_nowait()
            self.dropped += 1
            logging.warning(f"Topic '{topic}' is full, dropped {oldest}")
        queue.put_nowait(event)

    async def get(self, topic: str) -> E:
        """
        Wait for the next event on a topic.

        Args:
            topic: The topic name.

        Returns:
            The next event.
        """
        self.declare_topic(topic)
        return await self.queues[topic].get()

    def pending(self, topic: str) -> int:
        """
        Number of events waiting on a topic.

        Returns:
            Queue size, 0 for unknown topics.
        """
        queue = self.queues.get(topic)
        return queue.qsize() if queue else 0

    def get_topics(self) -> set[str]:
        """
        Returns all available topic names.

        Returns:
            Set of topic names.
        """
        return set(self.queues.keys())
