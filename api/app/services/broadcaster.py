"""Domain events emitted by lifecycle commands and their fan-out."""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)

SONG_REQUEST_CREATED = "songRequestCreated"
SONG_REQUEST_UPDATED = "songRequestUpdated"
SONG_REQUEST_DELETED = "songRequestDeleted"
SONG_REQUEST_LIKED = "songRequestLiked"
SONG_REQUEST_APPROVED = "songRequestApproved"
SONG_REQUEST_REJECTED = "songRequestRejected"
SONG_REQUEST_PLAYED = "songRequestPlayed"
SONG_REQUEST_SKIPPED = "songRequestSkipped"


def event_room(event_id: int) -> str:
    """Return the Socket.IO room name for an event."""
    return f"event_{event_id}"


@dataclass(frozen=True)
class DomainEvent:
    name: str
    event_id: int
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def room(self) -> str:
        return event_room(self.event_id)


def song_request_event(name: str, event_id: int, song_request: dict[str, Any], **extra: Any) -> DomainEvent:
    """Build a song request domain event with the standard payload shape."""
    payload = {"songRequest": song_request, "eventId": event_id, **extra}
    return DomainEvent(name=name, event_id=event_id, payload=payload)


class EventBroadcaster(Protocol):
    async def publish(self, event: DomainEvent) -> None:
        ...


class SocketIOBroadcaster:
    """Emit domain events to the per-event Socket.IO room."""

    def __init__(self, server):
        self.server = server

    async def publish(self, event: DomainEvent) -> None:
        # Runs after commit; emit failures are logged, never raised.
        try:
            await self.server.emit(event.name, event.payload, room=event.room)
            logger.debug("Emitted %s to %s", event.name, event.room)
        except Exception as e:
            logger.error(f"Failed to emit {event.name} to {event.room}: {e}")
