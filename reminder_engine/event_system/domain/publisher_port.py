from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .events import EventBase

E = TypeVar("E", bound=EventBase)


class PublisherPort(ABC, Generic[E]):
    """
    An abstract port for a message publisher.
    Publishing is fire-and-forget: it must never block the producer.
    """

    @abstractmethod
    async def publish(self, event: E) -> None:
        """Publishes an event to the topic named in its metadata."""
        raise NotImplementedError
