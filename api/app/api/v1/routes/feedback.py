"""Event feedback routes."""
from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user, get_optional_current_user
from app.db.session import get_db
from app.models.person import Person
from app.schemas.event_feedback import (
    EventFeedbackCreate,
    EventFeedbackListOut,
    EventFeedbackOut,
    EventFeedbackQuery,
    FeedbackSort,
    FeedbackStatsOut,
)
from app.services import feedback as feedback_service

router = APIRouter(prefix="/events/{event_id}/feedback", tags=["feedback"])


@router.get("", response_model=EventFeedbackListOut)
def list_event_feedback(
    event_id: int,
    rating: int | None = Query(default=None, ge=1, le=5),
    approved: bool | None = Query(default=None),
    sort: FeedbackSort = Query(default="newest"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Person | None = Depends(get_optional_current_user),
):
    """List approved feedback; the event manager also sees pending entries."""
    params = EventFeedbackQuery(rating=rating, approved=approved, sort=sort, page=page, limit=limit)
    return feedback_service.list_feedback(db, current_user, event_id, params)


@router.post("", response_model=EventFeedbackOut)
def submit_event_feedback(
    event_id: int,
    payload: EventFeedbackCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Person | None = Depends(get_optional_current_user),
):
    ip_address = request.client.host if request.client else None
    return feedback_service.submit_feedback(db, current_user, event_id, payload, ip_address=ip_address)


@router.get("/stats", response_model=FeedbackStatsOut)
def get_feedback_stats(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    """Rating summary over approved feedback (event manager only)."""
    return feedback_service.feedback_stats(db, current_user, event_id)


@router.get("/{feedback_id}", response_model=EventFeedbackOut)
def get_event_feedback(
    event_id: int,
    feedback_id: int,
    db: Session = Depends(get_db),
    current_user: Person | None = Depends(get_optional_current_user),
):
    return feedback_service.get_feedback(db, current_user, event_id, feedback_id)


@router.post("/{feedback_id}/approve", response_model=EventFeedbackOut)
def approve_event_feedback(
    event_id: int,
    feedback_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    return feedback_service.approve_feedback(db, current_user, event_id, feedback_id)


@router.delete("/{feedback_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event_feedback(
    event_id: int,
    feedback_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    feedback_service.delete_feedback(db, current_user, event_id, feedback_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
