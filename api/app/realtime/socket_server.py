"""Socket.IO server: per-event rooms and the broadcaster that feeds them."""

import logging
from typing import Any

import socketio
from sqlalchemy.orm import Session

from app.auth.jwt import TokenError, decode_access_token
from app.config.settings import settings
from app.crud.person import person_crud
from app.db.session import SessionLocal
from app.models.person import Person
from app.services.broadcaster import EventBroadcaster, SocketIOBroadcaster, event_room
from app.services.errors import DomainError, Unauthorized, ValidationError
from app.services.events import get_event
from app.services.memberships import event_manager

logger = logging.getLogger(__name__)

sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=settings.ALLOWED_ORIGINS,
)
broadcaster = SocketIOBroadcaster(sio)


def get_broadcaster() -> EventBroadcaster:
    """FastAPI dependency returning the process-wide broadcaster."""
    return broadcaster


def parse_event_id(data: Any) -> int:
    raw = data.get("eventId") if isinstance(data, dict) else data
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError("eventId is required", field="eventId") from exc


def authorize_room_join(db: Session, person_id: int | None, event_id: int) -> str:
    """Return the room for the event when the socket's principal may view it."""
    principal: Person | None = None
    if person_id is not None:
        principal = person_crud.get(db, person_id)
        if principal is None:
            raise Unauthorized("Account not found")
    event = get_event(db, principal, event_id)
    return event_room(event.id)


def room_join_ack(db: Session, person_id: int | None, event_id: int) -> dict[str, Any]:
    """Payload for ``joinedEvent``; tells the client whether it manages the event."""
    is_manager = person_id is not None and event_manager(db, event_id) == person_id
    return {"eventId": event_id, "isManager": is_manager}


@sio.event
async def connect(sid, environ, auth=None):
    person_id = None
    token = auth.get("token") if isinstance(auth, dict) else None
    if token:
        try:
            person_id = int(decode_access_token(token)["sub"])
        except (TokenError, ValueError) as exc:
            logger.info("Socket %s rejected: %s", sid, exc)
            return False
    await sio.save_session(sid, {"person_id": person_id})
    logger.debug("Socket %s connected (person=%s)", sid, person_id)


@sio.event
async def disconnect(sid):
    logger.debug("Socket %s disconnected", sid)


@sio.on("joinEvent")
async def join_event_room(sid, data):
    try:
        event_id = parse_event_id(data)
        session = await sio.get_session(sid)
        db = SessionLocal()
        try:
            room = authorize_room_join(db, session.get("person_id"), event_id)
            ack = room_join_ack(db, session.get("person_id"), event_id)
        finally:
            db.close()
    except DomainError as exc:
        await sio.emit("error", exc.to_detail(), room=sid)
        return
    await sio.enter_room(sid, room)
    await sio.emit("joinedEvent", ack, room=sid)


@sio.on("leaveEvent")
async def leave_event_room(sid, data):
    try:
        event_id = parse_event_id(data)
    except DomainError as exc:
        await sio.emit("error", exc.to_detail(), room=sid)
        return
    await sio.leave_room(sid, event_room(event_id))
    await sio.emit("leftEvent", {"eventId": event_id}, room=sid)
