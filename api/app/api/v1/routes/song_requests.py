"""Song request routes."""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user, get_optional_current_user
from app.db.session import get_db
from app.models.enums import SongStatus
from app.models.person import Person
from app.realtime.socket_server import get_broadcaster
from app.schemas.song_request import (
    EventStatsOut,
    LikeToggleOut,
    SongRequestApprove,
    SongRequestCreate,
    SongRequestListOut,
    SongRequestOut,
    SongRequestPlayed,
    SongRequestQuery,
    SongRequestReject,
    SongRequestSort,
    SongRequestUpdate,
)
from app.services import queue, song_requests
from app.services.broadcaster import EventBroadcaster

router = APIRouter(prefix="/events/{event_id}", tags=["song-requests"])


@router.get("/song-requests", response_model=SongRequestListOut)
def list_song_requests(
    event_id: int,
    status_filter: SongStatus | None = Query(default=None, alias="status"),
    priority: int | None = Query(default=None, ge=0),
    requested_by_id: int | None = Query(default=None),
    search: str | None = Query(default=None, max_length=100),
    sort: SongRequestSort = Query(default="-created_at"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Person | None = Depends(get_optional_current_user),
):
    """List song requests for an event with typed filters."""
    params = SongRequestQuery(
        status=status_filter,
        priority=priority,
        requested_by_id=requested_by_id,
        search=search,
        sort=sort,
        page=page,
        limit=limit,
    )
    return queue.list_requests(db, current_user, event_id, params)


@router.post("/song-requests", response_model=SongRequestOut)
async def create_song_request(
    event_id: int,
    payload: SongRequestCreate,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    """Request a song for an active event."""
    request = await song_requests.create_request(db, broadcaster, current_user, event_id, payload)
    return queue.serialize_request(request)


@router.get("/song-requests/{request_id}", response_model=SongRequestOut)
def get_song_request(
    event_id: int,
    request_id: int,
    db: Session = Depends(get_db),
    current_user: Person | None = Depends(get_optional_current_user),
):
    return queue.serialize_request(queue.get_request(db, current_user, event_id, request_id))


@router.patch("/song-requests/{request_id}", response_model=SongRequestOut)
async def update_song_request(
    event_id: int,
    request_id: int,
    payload: SongRequestUpdate,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    """Edit a pending request."""
    request = await song_requests.update_request(db, broadcaster, current_user, event_id, request_id, payload)
    return queue.serialize_request(request)


@router.delete("/song-requests/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_song_request(
    event_id: int,
    request_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    await song_requests.delete_request(db, broadcaster, current_user, event_id, request_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/song-requests/{request_id}/like", response_model=LikeToggleOut)
async def toggle_song_request_like(
    event_id: int,
    request_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    """Like a request, or remove the caller's like."""
    action, request = await song_requests.toggle_like(db, broadcaster, current_user, event_id, request_id)
    return LikeToggleOut(
        action=action,
        like_count=request.like_count,
        song_request=queue.serialize_request(request),
    )


@router.post("/song-requests/{request_id}/approve", response_model=SongRequestOut)
async def approve_song_request(
    event_id: int,
    request_id: int,
    payload: SongRequestApprove | None = None,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    request = await song_requests.approve(
        db,
        broadcaster,
        current_user,
        event_id,
        request_id,
        queue_position=payload.queue_position if payload else None,
    )
    return queue.serialize_request(request)


@router.post("/song-requests/{request_id}/reject", response_model=SongRequestOut)
async def reject_song_request(
    event_id: int,
    request_id: int,
    payload: SongRequestReject | None = None,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    request = await song_requests.reject(
        db,
        broadcaster,
        current_user,
        event_id,
        request_id,
        reason=payload.reason if payload else None,
    )
    return queue.serialize_request(request)


@router.post("/song-requests/{request_id}/play", response_model=SongRequestOut)
async def mark_song_request_played(
    event_id: int,
    request_id: int,
    payload: SongRequestPlayed | None = None,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    request = await song_requests.mark_played(
        db,
        broadcaster,
        current_user,
        event_id,
        request_id,
        duration=payload.duration if payload else None,
    )
    return queue.serialize_request(request)


@router.post("/song-requests/{request_id}/skip", response_model=SongRequestOut)
async def skip_song_request(
    event_id: int,
    request_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    request = await song_requests.skip(db, broadcaster, current_user, event_id, request_id)
    return queue.serialize_request(request)


@router.get("/queue", response_model=list[SongRequestOut])
def get_playback_queue(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: Person | None = Depends(get_optional_current_user),
):
    """Approved requests in playback order."""
    return queue.get_queue(db, current_user, event_id)


@router.get("/review-queue", response_model=list[SongRequestOut])
def get_review_queue(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    """Pending requests ranked by priority and likes (event manager only)."""
    return queue.get_review_queue(db, current_user, event_id)


@router.get("/timebombs", response_model=list[SongRequestOut])
def get_active_time_bombs(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    return queue.get_time_bombs(db, current_user, event_id)


@router.get("/stats", response_model=EventStatsOut)
def get_event_stats(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    return queue.get_event_stats(db, current_user, event_id)
