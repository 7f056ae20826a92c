"""Event type definitions for the internal event bus."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Types of events that can be broadcast."""

    # Human-readable notifications about repository activity
    ALERT = "alert"

    # Update pipeline events
    UPDATE_STARTED = "update.started"
    UPDATE_COMPLETED = "update.completed"
    UPDATE_ABORTED = "update.aborted"


class Event(BaseModel):
    """A broadcast event."""

    id: str = Field(default_factory=lambda: uuid4().hex[:12])
    type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    data: dict[str, Any] = Field(default_factory=dict)
