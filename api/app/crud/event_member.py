"""Event roster CRUD helpers"""

from typing import Optional
from sqlalchemy.orm import Session

from app.crud.base import BaseCRUD
from app.models.event_member import EventMember
from app.models.person import Person
from app.schemas.event_member import EventMemberCreate


class EventMemberCRUD(BaseCRUD[EventMember, EventMemberCreate, EventMemberCreate]):
    def get_member(self, db: Session, event_id: int, person_id: int) -> Optional[EventMember]:
        """Return a roster row if it exists."""
        return (
            db.query(EventMember)
            .filter(
                EventMember.event_id == event_id,
                EventMember.person_id == person_id,
            )
            .first()
        )

    def is_approved_member(self, db: Session, event_id: int, person_id: int) -> bool:
        """Return whether the person is an approved member of the event."""
        member = self.get_member(db, event_id, person_id)
        return bool(member and member.is_approved)

    def count_members(self, db: Session, event_id: int) -> int:
        """Count roster rows for the event."""
        return db.query(EventMember).filter(EventMember.event_id == event_id).count()

    def list_members(self, db: Session, event_id: int) -> list[tuple[EventMember, Person]]:
        """List roster rows with person data for the event."""
        rows = (
            db.query(EventMember, Person)
            .join(Person, Person.id == EventMember.person_id)
            .filter(EventMember.event_id == event_id)
            .order_by(EventMember.joined_at.asc(), EventMember.id.asc())
            .all()
        )
        return [(member, person) for member, person in rows]


event_member_crud = EventMemberCRUD(EventMember)
