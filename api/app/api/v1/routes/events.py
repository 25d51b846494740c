"""Event routes."""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user, get_optional_current_user
from app.db.session import get_db
from app.models.enums import EventStatus, EventType
from app.models.person import Person
from app.schemas.event import (
    EventCreate,
    EventListOut,
    EventOut,
    EventQuery,
    EventSort,
    EventStatusUpdate,
    EventUpdate,
)
from app.services import events as event_service

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=EventListOut)
def list_events(
    status_filter: EventStatus | None = Query(default=None, alias="status"),
    event_type: EventType | None = Query(default=None),
    manager_id: int | None = Query(default=None),
    search: str | None = Query(default=None, max_length=100),
    sort: EventSort = Query(default="start_date"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=25, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Person | None = Depends(get_optional_current_user),
):
    """List events visible to the caller."""
    params = EventQuery(
        status=status_filter,
        event_type=event_type,
        manager_id=manager_id,
        search=search,
        sort=sort,
        page=page,
        limit=limit,
    )
    return event_service.list_events(db, current_user, params)


@router.post("", response_model=EventOut)
def create_event(
    payload: EventCreate,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    """Create a Draft event managed by the caller."""
    event = event_service.create_event(db, current_user, payload)
    return event_service.to_event_out(db, event)


@router.get("/{event_id}", response_model=EventOut)
def get_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: Person | None = Depends(get_optional_current_user),
):
    event = event_service.get_event(db, current_user, event_id)
    return event_service.to_event_out(db, event)


@router.patch("/{event_id}", response_model=EventOut)
def update_event(
    event_id: int,
    payload: EventUpdate,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    """Update event details and request settings (event manager only)."""
    event = event_service.update_event(db, current_user, event_id, payload)
    return event_service.to_event_out(db, event)


@router.post("/{event_id}/status", response_model=EventOut)
def change_event_status(
    event_id: int,
    payload: EventStatusUpdate,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    """Move the event through Draft, Published, Active, Paused, Completed or Cancelled."""
    event = event_service.change_status(db, current_user, event_id, payload.status)
    return event_service.to_event_out(db, event)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    """Delete the event and everything attached to it."""
    event_service.delete_event(db, current_user, event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
