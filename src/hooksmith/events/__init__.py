"""Event system: repository webhook events and the internal event bus."""

from hooksmith.events.bus import EventBus, event_bus
from hooksmith.events.repository import (
    CommitAuthor,
    CommitRecord,
    PushPayload,
    RepositoryEvent,
    RepositoryEventKind,
    branch_from_ref,
    mapping_at,
    parse_event,
)
from hooksmith.events.types import Event, EventType

__all__ = [
    "CommitAuthor",
    "CommitRecord",
    "Event",
    "EventBus",
    "EventType",
    "PushPayload",
    "RepositoryEvent",
    "RepositoryEventKind",
    "branch_from_ref",
    "event_bus",
    "mapping_at",
    "parse_event",
]
