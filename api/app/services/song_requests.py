"""Lifecycle commands for song requests.

Every command loads the event and the request, checks the authorization
policy, checks the status guard, persists with a conditional update in a
single transaction and then emits exactly one domain event.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.crud.event import event_crud
from app.crud.song_request import song_request_crud
from app.crud.song_request_like import song_request_like_crud
from app.models.base import utcnow
from app.models.enums import SongStatus
from app.models.event import Event
from app.models.person import Person
from app.models.song_request import SongRequest
from app.models.song_request_like import SongRequestLike
from app.schemas.song_request import SongRequestCreate, SongRequestUpdate
from app.services import broadcaster as events
from app.services.authorization import Action, is_admin, is_event_manager, require
from app.services.broadcaster import DomainEvent, EventBroadcaster, song_request_event
from app.services.errors import (
    DomainError,
    DuplicateRequest,
    EventNotActive,
    Forbidden,
    InvalidTransition,
    LimitExceeded,
    NotFound,
    ValidationError,
)
from app.services.memberships import load_event
from app.services.queue import serialize_request
from app.services.song_request_state import (
    EDITABLE_STATUSES,
    TIME_BOMB_EXPIRED_REASON,
    editable_fields,
    ensure_editable,
    ensure_transition,
    source_statuses,
    time_bomb_deadline,
)

logger = logging.getLogger(__name__)


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error committing song request {action}: {e}")
        raise


def _load_request(
    db: Session,
    principal: Person | None,
    event_id: int,
    request_id: int,
) -> tuple[Event, bool, SongRequest]:
    event, participant = load_event(db, principal, event_id)
    request = song_request_crud.get_for_event(db, event.id, request_id)
    if not request:
        raise NotFound("Song request not found")
    return event, participant, request


def _transition_conflict(db: Session, request_id: int, operation: str) -> DomainError:
    """Roll back a failed conditional update and explain why it matched nothing."""
    db.rollback()
    current = song_request_crud.get(db, request_id)
    if current is None:
        return NotFound("Song request not found")
    return InvalidTransition(operation, current.status)


def _payload(request: SongRequest, now: datetime) -> dict[str, Any]:
    return serialize_request(request, now).model_dump(mode="json")


async def create_request(
    db: Session,
    broadcaster: EventBroadcaster,
    principal: Person,
    event_id: int,
    payload: SongRequestCreate,
    *,
    now: datetime | None = None,
) -> SongRequest:
    """Submit a new Pending request for the principal."""
    now = now or utcnow()
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.create_request, is_participant=participant)
    if not event.is_active:
        raise EventNotActive("Song requests can only be made while the event is active")

    if not event.allow_duplicates:
        duplicate = song_request_crud.find_duplicate(
            db,
            event.id,
            principal.id,
            title=payload.title,
            artist=payload.artist,
            spotify_id=payload.spotify_id,
            youtube_id=payload.youtube_id,
            apple_music_id=payload.apple_music_id,
        )
        if duplicate:
            raise DuplicateRequest("You already requested this song for this event")

    outstanding = song_request_crud.count_outstanding(db, event.id, principal.id)
    if outstanding >= event.max_songs_per_user:
        raise LimitExceeded(f"You can have at most {event.max_songs_per_user} open requests for this event")

    expires_at = time_bomb_deadline(
        now,
        requested=payload.is_time_bomb,
        enabled=event.time_bomb_enabled,
        duration_minutes=event.time_bomb_duration,
    )
    data = payload.model_dump(exclude={"is_time_bomb", "time_bomb_amount"})
    data.update(
        {
            "event_id": event.id,
            "requested_by_id": principal.id,
            "status": SongStatus.pending.value,
            "is_time_bomb": expires_at is not None,
            "time_bomb_expires_at": expires_at,
            "time_bomb_amount": payload.time_bomb_amount if expires_at is not None else None,
            "created_at": now,
            "updated_at": now,
        }
    )
    request = song_request_crud.create(db, data, commit=False)
    event_crud.refresh_totals(db, event.id)
    _commit(db, "create")
    db.refresh(request)
    logger.info(
        "Song request %s (%s) created in event %s by %s",
        request.id,
        request.full_song_name,
        event.id,
        principal.id,
    )

    await broadcaster.publish(
        song_request_event(events.SONG_REQUEST_CREATED, event.id, _payload(request, now))
    )
    return request


async def toggle_like(
    db: Session,
    broadcaster: EventBroadcaster,
    principal: Person,
    event_id: int,
    request_id: int,
    *,
    now: datetime | None = None,
) -> tuple[str, SongRequest]:
    """Like the request, or unlike it when the principal already liked it."""
    now = now or utcnow()
    event, participant, request = _load_request(db, principal, event_id, request_id)
    require(principal, event, Action.like_request, is_participant=participant)

    person_id = principal.id
    existing = song_request_like_crud.get_like(db, request_id, person_id)
    if existing:
        db.delete(existing)
        action = "unliked"
    else:
        db.add(SongRequestLike(song_request_id=request_id, person_id=person_id, liked_at=now))
        action = "liked"
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        if song_request_crud.get(db, request_id) is None:
            raise NotFound("Song request not found")
        if song_request_like_crud.get_like(db, request_id, person_id) is None:
            raise
        # A concurrent like from the same person won.
        action = "liked"

    if not song_request_crud.refresh_like_count(db, request_id):
        db.rollback()
        raise NotFound("Song request not found")
    event_crud.refresh_totals(db, event_id)
    _commit(db, "like")
    db.refresh(request)
    logger.info("Song request %s %s by %s (likes=%s)", request.id, action, principal.id, request.like_count)

    await broadcaster.publish(
        song_request_event(
            events.SONG_REQUEST_LIKED,
            event.id,
            _payload(request, now),
            action=action,
            userId=principal.id,
            likeCount=request.like_count,
        )
    )
    return action, request


async def _moderate(
    db: Session,
    broadcaster: EventBroadcaster,
    principal: Person,
    event_id: int,
    request_id: int,
    operation: str,
    event_name: str,
    values: dict[str, Any],
    now: datetime,
    queue_position_hint: int | None = None,
) -> SongRequest:
    event, participant, request = _load_request(db, principal, event_id, request_id)
    require(principal, event, Action.moderate_request, is_participant=participant)
    target = ensure_transition(operation, request.status)

    changes = {**values, "status": target.value, "updated_by_id": principal.id, "updated_at": now}
    if target == SongStatus.approved:
        changes["queue_position"] = event_crud.next_queue_position(db, event.id, queue_position_hint)

    if not song_request_crud.transition(db, request_id, source_statuses(target), changes):
        raise _transition_conflict(db, request_id, operation)
    _commit(db, operation)
    db.refresh(request)
    logger.info("Song request %s %s by %s", request.id, target.value.lower(), principal.id)

    await broadcaster.publish(song_request_event(event_name, event.id, _payload(request, now)))
    return request


async def approve(
    db: Session,
    broadcaster: EventBroadcaster,
    principal: Person,
    event_id: int,
    request_id: int,
    *,
    queue_position: int | None = None,
    now: datetime | None = None,
) -> SongRequest:
    """Approve a Pending request and give it the next queue position."""
    now = now or utcnow()
    return await _moderate(
        db,
        broadcaster,
        principal,
        event_id,
        request_id,
        "approve",
        events.SONG_REQUEST_APPROVED,
        {"approved_by_id": principal.id, "approved_at": now},
        now,
        queue_position_hint=queue_position,
    )


async def reject(
    db: Session,
    broadcaster: EventBroadcaster,
    principal: Person,
    event_id: int,
    request_id: int,
    *,
    reason: str | None = None,
    now: datetime | None = None,
) -> SongRequest:
    now = now or utcnow()
    return await _moderate(
        db,
        broadcaster,
        principal,
        event_id,
        request_id,
        "reject",
        events.SONG_REQUEST_REJECTED,
        {"rejected_by_id": principal.id, "rejected_at": now, "rejection_reason": reason},
        now,
    )


async def mark_played(
    db: Session,
    broadcaster: EventBroadcaster,
    principal: Person,
    event_id: int,
    request_id: int,
    *,
    duration: int | None = None,
    now: datetime | None = None,
) -> SongRequest:
    now = now or utcnow()
    return await _moderate(
        db,
        broadcaster,
        principal,
        event_id,
        request_id,
        "play",
        events.SONG_REQUEST_PLAYED,
        {"played_by_id": principal.id, "played_at": now, "play_duration": duration},
        now,
    )


async def skip(
    db: Session,
    broadcaster: EventBroadcaster,
    principal: Person,
    event_id: int,
    request_id: int,
    *,
    now: datetime | None = None,
) -> SongRequest:
    now = now or utcnow()
    return await _moderate(
        db,
        broadcaster,
        principal,
        event_id,
        request_id,
        "skip",
        events.SONG_REQUEST_SKIPPED,
        {"skipped_by_id": principal.id, "skipped_at": now},
        now,
    )


async def update_request(
    db: Session,
    broadcaster: EventBroadcaster,
    principal: Person,
    event_id: int,
    request_id: int,
    payload: SongRequestUpdate,
    *,
    now: datetime | None = None,
) -> SongRequest:
    """Edit a Pending request. Priority and DJ note are manager-only."""
    now = now or utcnow()
    event, participant, request = _load_request(db, principal, event_id, request_id)
    owns_request = request.requested_by_id == principal.id
    require(principal, event, Action.update_request, is_participant=participant, owns_request=owns_request)
    ensure_editable(request.status)

    changes = payload.model_dump(exclude_unset=True)
    manager = is_admin(principal) or is_event_manager(principal, event)
    restricted = set(changes) - editable_fields(is_manager=manager)
    if restricted:
        raise Forbidden(f"Only the event manager can change: {', '.join(sorted(restricted))}")
    for key in ("title", "artist"):
        if key in changes:
            value = (changes[key] or "").strip()
            if not value:
                raise ValidationError(f"{key} cannot be blank", field=key)
            changes[key] = value
    if "priority" in changes and changes["priority"] is None:
        raise ValidationError("priority cannot be null", field="priority")

    changes.update({"updated_by_id": principal.id, "updated_at": now})
    if not song_request_crud.transition(db, request_id, EDITABLE_STATUSES, changes):
        raise _transition_conflict(db, request_id, "update")
    _commit(db, "update")
    db.refresh(request)
    logger.info("Song request %s updated by %s", request.id, principal.id)

    await broadcaster.publish(
        song_request_event(events.SONG_REQUEST_UPDATED, event.id, _payload(request, now))
    )
    return request


async def delete_request(
    db: Session,
    broadcaster: EventBroadcaster,
    principal: Person,
    event_id: int,
    request_id: int,
    *,
    now: datetime | None = None,
) -> None:
    """Delete a request in any status; its queue position is never reused."""
    now = now or utcnow()
    event, participant, request = _load_request(db, principal, event_id, request_id)
    owns_request = request.requested_by_id == principal.id
    require(principal, event, Action.delete_request, is_participant=participant, owns_request=owns_request)

    snapshot = _payload(request, now)
    db.delete(request)
    try:
        db.flush()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting SongRequest {request_id}: {e}")
        raise
    event_crud.refresh_totals(db, event.id)
    _commit(db, "delete")
    logger.info("Song request %s deleted by %s", request_id, principal.id)

    await broadcaster.publish(song_request_event(events.SONG_REQUEST_DELETED, event.id, snapshot))


def expire_overdue_time_bombs(
    db: Session,
    now: datetime,
    event_id: int | None = None,
) -> list[SongRequest]:
    """Reject every Pending TimeBomb whose deadline has passed.

    Each request is expired in its own transaction. Requests moved by a
    manager in the meantime are left alone. Nothing is broadcast here.
    """
    expired: list[SongRequest] = []
    for request in song_request_crud.expired_time_bombs(db, now, event_id=event_id):
        changed = song_request_crud.transition(
            db,
            request.id,
            [SongStatus.pending],
            {
                "status": SongStatus.rejected.value,
                "rejected_at": now,
                "rejection_reason": TIME_BOMB_EXPIRED_REASON,
                "updated_at": now,
            },
        )
        if not changed:
            db.rollback()
            continue
        _commit(db, "expire")
        db.refresh(request)
        expired.append(request)

    if expired:
        logger.info("Expired %s TimeBomb request(s)", len(expired))
    return expired


def expiry_events(expired: list[SongRequest], now: datetime) -> list[DomainEvent]:
    return [
        song_request_event(events.SONG_REQUEST_REJECTED, request.event_id, _payload(request, now))
        for request in expired
    ]


async def expire_time_bombs(
    db: Session,
    broadcaster: EventBroadcaster,
    *,
    now: datetime | None = None,
    event_id: int | None = None,
) -> list[SongRequest]:
    """Expire overdue TimeBombs and announce each rejection."""
    now = now or utcnow()
    expired = expire_overdue_time_bombs(db, now, event_id=event_id)
    for domain_event in expiry_events(expired, now):
        await broadcaster.publish(domain_event)
    return expired
