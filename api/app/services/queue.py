"""Read views over an event's song requests.

None of these queries change queue positions, priorities or statuses.
"""

from datetime import datetime

from sqlalchemy.orm import Session

from app.crud.song_request import song_request_crud
from app.models.base import utcnow
from app.models.person import Person
from app.models.song_request import SongRequest
from app.schemas.song_request import (
    EventStatsOut,
    PriorityStatOut,
    SongRequestListOut,
    SongRequestOut,
    SongRequestQuery,
    StatusStatOut,
)
from app.services.authorization import Action, require
from app.services.errors import NotFound
from app.services.memberships import load_event
from app.services.song_request_state import is_time_bomb_active
from app.utils.datetime import remaining_seconds


def serialize_request(request: SongRequest, now: datetime | None = None) -> SongRequestOut:
    """Build the API shape of a request, including derived TimeBomb fields."""
    now = now or utcnow()
    out = SongRequestOut.model_validate(request)
    active = is_time_bomb_active(
        is_time_bomb=request.is_time_bomb,
        status=request.status,
        expires_at=request.time_bomb_expires_at,
        now=now,
    )
    return out.model_copy(
        update={
            "is_time_bomb_active": active,
            "time_bomb_remaining_seconds": remaining_seconds(request.time_bomb_expires_at, now) if active else 0,
        }
    )


def get_request(db: Session, principal: Person | None, event_id: int, request_id: int) -> SongRequest:
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.view_event, is_participant=participant)
    request = song_request_crud.get_for_event(db, event.id, request_id)
    if not request:
        raise NotFound("Song request not found")
    return request


def list_requests(
    db: Session,
    principal: Person | None,
    event_id: int,
    params: SongRequestQuery,
    now: datetime | None = None,
) -> SongRequestListOut:
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.view_event, is_participant=participant)
    total, items = song_request_crud.list_for_event(db, event.id, params)
    return SongRequestListOut(
        total=total,
        page=params.page,
        limit=params.limit,
        items=[serialize_request(item, now) for item in items],
    )


def get_queue(
    db: Session,
    principal: Person | None,
    event_id: int,
    now: datetime | None = None,
) -> list[SongRequestOut]:
    """Approved requests in playback order."""
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.view_event, is_participant=participant)
    return [serialize_request(item, now) for item in song_request_crud.playback_queue(db, event.id)]


def get_review_queue(
    db: Session,
    principal: Person,
    event_id: int,
    now: datetime | None = None,
) -> list[SongRequestOut]:
    """Pending requests ranked for the manager's review."""
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.view_review_queue, is_participant=participant)
    return [serialize_request(item, now) for item in song_request_crud.review_queue(db, event.id)]


def get_time_bombs(
    db: Session,
    principal: Person,
    event_id: int,
    now: datetime | None = None,
) -> list[SongRequestOut]:
    """Unexpired TimeBombs, soonest deadline first, whether or not swept yet."""
    now = now or utcnow()
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.view_time_bombs, is_participant=participant)
    return [serialize_request(item, now) for item in song_request_crud.active_time_bombs(db, event.id, now)]


def get_event_stats(db: Session, principal: Person, event_id: int) -> EventStatsOut:
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.view_stats, is_participant=participant)
    by_status = [
        StatusStatOut(status=status, count=count, total_likes=likes)
        for status, count, likes in song_request_crud.stats_by_status(db, event.id)
    ]
    by_priority = [
        PriorityStatOut(priority=priority, count=count)
        for priority, count in song_request_crud.stats_by_priority(db, event.id)
    ]
    return EventStatsOut(
        event_id=event.id,
        total_requests=sum(row.count for row in by_status),
        total_likes=sum(row.total_likes for row in by_status),
        by_status=by_status,
        by_priority=by_priority,
    )
