from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .events import EventBase

E = TypeVar("E", bound=EventBase)


class BrokerPort(ABC, Generic[E]):
    """
    Abstract port for a topic broker.
    Owns one queue per topic and routes published events to it.
    """

    @abstractmethod
    def declare_topic(self, topic: str) -> None:
        """Create the topic if it does not exist. Idempotent."""
        raise NotImplementedError

    @abstractmethod
    def publish(self, topic: str, event: E) -> None:
        """
        Put an event on a topic without blocking the caller.

        Args:
            topic: The topic name.
            event: The event to publish.
        """
        raise NotImplementedError

    @abstractmethod
    async def get(self, topic: str) -> E:
        """Wait for and return the next event on a topic."""
        raise NotImplementedError

    @abstractmethod
    def pending(self, topic: str) -> int:
        """Number of events waiting on a topic."""
        raise NotImplementedError

    @abstractmethod
    def get_topics(self) -> set[str]:
        """All declared topic names."""
        raise NotImplementedError
