"""Event feedback: ratings and comments left by attendees."""

import logging

from sqlalchemy.orm import Session

from app.crud.event_feedback import event_feedback_crud
from app.models.enums import EventStatus
from app.models.event import Event
from app.models.event_feedback import EventFeedback
from app.models.person import Person
from app.schemas.event_feedback import (
    EventFeedbackCreate,
    EventFeedbackListOut,
    EventFeedbackOut,
    EventFeedbackQuery,
    FeedbackStatsOut,
)
from app.services.authorization import Action, can_perform, require
from app.services.errors import EventNotActive, NotFound
from app.services.memberships import load_event

logger = logging.getLogger(__name__)

FEEDBACK_STATUSES = (EventStatus.active.value, EventStatus.paused.value, EventStatus.completed.value)
RATINGS = range(1, 6)


def _manages(principal: Person | None, event: Event, participant: bool) -> bool:
    if principal is None:
        return False
    return bool(can_perform(principal, event, Action.manage_event, is_participant=participant))


def _get_or_404(db: Session, event_id: int, feedback_id: int) -> EventFeedback:
    feedback = event_feedback_crud.get_for_event(db, event_id, feedback_id)
    if not feedback:
        raise NotFound("Feedback not found")
    return feedback


def submit_feedback(
    db: Session,
    principal: Person | None,
    event_id: int,
    payload: EventFeedbackCreate,
    *,
    ip_address: str | None = None,
) -> EventFeedback:
    """Record a rating for an event the caller can see.

    Feedback on events that require approval stays hidden until the event
    manager approves it.
    """
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.view_event, is_participant=participant)
    if event.status not in FEEDBACK_STATUSES:
        raise EventNotActive("Feedback opens once the event is active")

    data = payload.model_dump()
    if data["first_name"] is None and principal is not None:
        data["first_name"] = principal.first_name
    data.update(
        {
            "event_id": event.id,
            "submitted_by_id": principal.id if principal is not None else None,
            "ip_address": ip_address,
            "is_approved": not event.requires_approval,
        }
    )
    feedback = event_feedback_crud.create(db, data)
    logger.info("Feedback %s (%s stars) left on event %s", feedback.id, feedback.rating, event.id)
    return feedback


def list_feedback(
    db: Session,
    principal: Person | None,
    event_id: int,
    params: EventFeedbackQuery,
) -> EventFeedbackListOut:
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.view_event, is_participant=participant)
    if not _manages(principal, event, participant):
        params = params.model_copy(update={"approved": True})
    total, items = event_feedback_crud.list_for_event(db, event.id, params)
    return EventFeedbackListOut(
        total=total,
        page=params.page,
        limit=params.limit,
        items=[EventFeedbackOut.model_validate(item) for item in items],
    )


def get_feedback(db: Session, principal: Person | None, event_id: int, feedback_id: int) -> EventFeedback:
    """Return one feedback entry; unapproved entries are visible to the manager only."""
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.view_event, is_participant=participant)
    feedback = _get_or_404(db, event.id, feedback_id)
    if not feedback.is_approved and not _manages(principal, event, participant):
        raise NotFound("Feedback not found")
    return feedback


def approve_feedback(db: Session, principal: Person, event_id: int, feedback_id: int) -> EventFeedback:
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.manage_event, is_participant=participant)
    feedback = _get_or_404(db, event.id, feedback_id)
    if not feedback.is_approved:
        feedback = event_feedback_crud.update(db, feedback, {"is_approved": True})
        logger.info("Feedback %s approved by %s", feedback.id, principal.id)
    return feedback


def delete_feedback(db: Session, principal: Person, event_id: int, feedback_id: int) -> None:
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.manage_event, is_participant=participant)
    feedback = _get_or_404(db, event.id, feedback_id)
    event_feedback_crud.delete(db, feedback.id)
    logger.info("Feedback %s deleted by %s", feedback_id, principal.id)


def feedback_stats(db: Session, principal: Person, event_id: int) -> FeedbackStatsOut:
    """Summarize approved ratings: count, mean rounded to one decimal, and 1-5 distribution."""
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.view_stats, is_participant=participant)
    counts = event_feedback_crud.approved_rating_counts(db, event.id)
    total = sum(counts.values())
    average = round(sum(rating * count for rating, count in counts.items()) / total, 1) if total else 0.0
    return FeedbackStatsOut(
        event_id=event.id,
        total_feedback=total,
        average_rating=average,
        rating_distribution={rating: counts.get(rating, 0) for rating in RATINGS},
    )
