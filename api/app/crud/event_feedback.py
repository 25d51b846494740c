"""Event feedback CRUD helpers"""

from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.crud.base import BaseCRUD
from app.models.event_feedback import EventFeedback
from app.schemas.event_feedback import EventFeedbackCreate, EventFeedbackQuery

SORT_ORDERS = {
    "newest": (EventFeedback.created_at.desc(), EventFeedback.id.desc()),
    "oldest": (EventFeedback.created_at.asc(), EventFeedback.id.asc()),
    "rating-high": (EventFeedback.rating.desc(), EventFeedback.created_at.desc(), EventFeedback.id.desc()),
    "rating-low": (EventFeedback.rating.asc(), EventFeedback.created_at.desc(), EventFeedback.id.desc()),
}


class EventFeedbackCRUD(BaseCRUD[EventFeedback, EventFeedbackCreate, EventFeedbackCreate]):
    def get_for_event(self, db: Session, event_id: int, feedback_id: int) -> Optional[EventFeedback]:
        return (
            db.query(EventFeedback)
            .filter(EventFeedback.event_id == event_id, EventFeedback.id == feedback_id)
            .first()
        )

    def list_for_event(
        self,
        db: Session,
        event_id: int,
        params: EventFeedbackQuery,
    ) -> tuple[int, list[EventFeedback]]:
        """Return one page of an event's feedback matching the typed filters."""
        query = db.query(EventFeedback).filter(EventFeedback.event_id == event_id)
        if params.approved is not None:
            query = query.filter(EventFeedback.is_approved.is_(params.approved))
        if params.rating is not None:
            query = query.filter(EventFeedback.rating == params.rating)
        query = query.order_by(*SORT_ORDERS[params.sort])
        return self.paginate(query, params.page, params.limit)

    def approved_rating_counts(self, db: Session, event_id: int) -> dict[int, int]:
        """Return rating -> count over the event's approved feedback."""
        rows = (
            db.query(EventFeedback.rating, func.count(EventFeedback.id))
            .filter(EventFeedback.event_id == event_id, EventFeedback.is_approved.is_(True))
            .group_by(EventFeedback.rating)
            .all()
        )
        return {int(rating): int(count) for rating, count in rows}


event_feedback_crud = EventFeedbackCRUD(EventFeedback)
