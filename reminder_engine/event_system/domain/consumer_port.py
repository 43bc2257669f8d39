from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from typing import Generic, TypeVar

from .events import EventBase

E = TypeVar("E", bound=EventBase)


class ConsumerPort(ABC, Generic[E]):
    """
    An abstract port for a message consumer.
    Events are consumed as an async generator.
    """

    @abstractmethod
    def consume(self, topic: str) -> AsyncGenerator[E, None]:
        """
        Consume events from a topic until a CompletedEvent arrives.

        Args:
            topic: The topic to consume from.

        Yields:
            Events in publish order.
        """
        raise NotImplementedError

    @abstractmethod
    def drain(self, topic: str) -> list[E]:
        """Return every event currently waiting on a topic without blocking."""
        raise NotImplementedError
