import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import polars as pl
import uuid6
from pydantic import BaseModel, Field


class EventMeta(BaseModel):
    """
    Metadata carried by every event.
    Provides a time-ordered unique event ID and a UTC timestamp.
    """

    topic: str = Field(
        default="",
        description="The topic the event is published on",
        examples=["reminders.notifications"],
    )
    event_id: uuid.UUID = Field(description="The unique event ID", default_factory=uuid6.uuid7)
    timestamp: datetime = Field(
        description="When the event was created",
        default_factory=lambda: datetime.now(UTC),
    )

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(id={self.event_id}, topic={self.topic})"

    def __repr__(self) -> str:
        return self.__str__()


@dataclass
class EventBase:
    """
    Base class for all events.
    Keyword payload is kept as a one-row polars DataFrame in `content`.
    """

    meta: EventMeta
    content: pl.DataFrame | None

    def __init__(self, topic: str = "", **kwargs: Any) -> None:
        """
        Initialize an event.

        Args:
            topic: The topic name for this event.
            **kwargs: Scalar payload values stored in the content DataFrame.
        """
        self.meta = EventMeta(topic=topic)
        if kwargs:
            self.content = pl.DataFrame({key: [value] for key, value in kwargs.items()})
        else:
            self.content = None

    def get_field(self, name: str) -> Any:
        """
        Read a payload value from the content frame.

        Returns:
            The stored value, or None if the event has no such field.
        """
        if self.content is None or name not in self.content.columns:
            return None
        return self.content[name].item()

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(id={self.meta.event_id}, topic={self.meta.topic})"

    def __repr__(self) -> str:
        return self.__str__()


class CompletedEvent(EventBase):
    """Signal event that ends a consumer stream."""

    def __init__(self, topic: str = "") -> None:
        super().__init__(topic=topic)
