"""Guest participant CRUD helpers"""

from typing import Optional, Sequence
from sqlalchemy.orm import Session

from app.crud.base import BaseCRUD
from app.models.event_participant import EventParticipant
from app.schemas.event_member import GuestJoin


class EventParticipantCRUD(BaseCRUD[EventParticipant, GuestJoin, GuestJoin]):
    def get_by_identity(
        self,
        db: Session,
        event_id: int,
        email: str,
        last_name: str,
    ) -> Optional[EventParticipant]:
        """Return the guest row matching email and last name."""
        return (
            db.query(EventParticipant)
            .filter(
                EventParticipant.event_id == event_id,
                EventParticipant.email == email.lower(),
                EventParticipant.last_name == last_name,
            )
            .first()
        )

    def has_approved_email(self, db: Session, event_id: int, email: str) -> bool:
        """Return whether an approved guest row exists for the email."""
        return (
            db.query(EventParticipant.id)
            .filter(
                EventParticipant.event_id == event_id,
                EventParticipant.email == email.lower(),
                EventParticipant.is_approved.is_(True),
            )
            .first()
            is not None
        )

    def get_for_event(self, db: Session, event_id: int, participant_id: int) -> Optional[EventParticipant]:
        return (
            db.query(EventParticipant)
            .filter(EventParticipant.event_id == event_id, EventParticipant.id == participant_id)
            .first()
        )

    def list_for_event(self, db: Session, event_id: int) -> Sequence[EventParticipant]:
        return (
            db.query(EventParticipant)
            .filter(EventParticipant.event_id == event_id)
            .order_by(EventParticipant.joined_at.asc(), EventParticipant.id.asc())
            .all()
        )

    def count_for_event(self, db: Session, event_id: int) -> int:
        return db.query(EventParticipant).filter(EventParticipant.event_id == event_id).count()


event_participant_crud = EventParticipantCRUD(EventParticipant)
