"""Event CRUD helpers"""

from typing import Optional
from sqlalchemy import case, exists, func, or_, select
from sqlalchemy.orm import Query, Session

from app.crud.base import BaseCRUD
from app.models.enums import Role
from app.models.event import Event
from app.models.event_member import EventMember
from app.models.event_participant import EventParticipant
from app.models.person import Person
from app.models.song_request import SongRequest
from app.schemas.event import EventCreate, EventQuery, EventUpdate

SORT_COLUMNS = {
    "start_date": Event.start_date,
    "created_at": Event.created_at,
    "name": Event.name,
}


class EventCRUD(BaseCRUD[Event, EventCreate, EventUpdate]):
    def visible_query(self, db: Session, principal: Optional[Person]) -> Query:
        """Return events the principal is allowed to see."""
        query = db.query(Event)
        if principal is not None and principal.role == Role.admin.value:
            return query
        if principal is None:
            return query.filter(Event.is_public.is_(True))

        approved_member = exists().where(
            EventMember.event_id == Event.id,
            EventMember.person_id == principal.id,
            EventMember.is_approved.is_(True),
        )
        conditions = [Event.is_public.is_(True), Event.manager_id == principal.id, approved_member]
        if principal.role == Role.guest.value:
            conditions.append(
                exists().where(
                    EventParticipant.event_id == Event.id,
                    EventParticipant.email == principal.email,
                    EventParticipant.is_approved.is_(True),
                )
            )
        return query.filter(or_(*conditions))

    def list_visible(
        self,
        db: Session,
        principal: Optional[Person],
        params: EventQuery,
    ) -> tuple[int, list[Event]]:
        """Return one page of visible events matching the typed filters."""
        query = self.visible_query(db, principal)
        if params.status is not None:
            query = query.filter(Event.status == params.status.value)
        if params.event_type is not None:
            query = query.filter(Event.event_type == params.event_type.value)
        if params.manager_id is not None:
            query = query.filter(Event.manager_id == params.manager_id)
        if params.search:
            pattern = f"%{params.search.strip()}%"
            query = query.filter(
                or_(
                    Event.name.ilike(pattern),
                    Event.description.ilike(pattern),
                    Event.venue_name.ilike(pattern),
                )
            )
        column = SORT_COLUMNS[params.sort.lstrip("-")]
        ordering = column.desc() if params.sort.startswith("-") else column.asc()
        query = query.order_by(ordering, Event.id.asc())
        return self.paginate(query, params.page, params.limit)

    def next_queue_position(self, db: Session, event_id: int, hint: int | None = None) -> int:
        """Advance the event's queue high-water mark and return the new value.

        A hint is honored only when it lies above the current mark. The update
        runs as a single statement so concurrent approvals never share a value.
        """
        if hint is not None:
            next_value = case((Event.queue_sequence < hint, hint), else_=Event.queue_sequence + 1)
        else:
            next_value = Event.queue_sequence + 1
        db.query(Event).filter(Event.id == event_id).update(
            {Event.queue_sequence: next_value},
            synchronize_session=False,
        )
        return db.query(Event.queue_sequence).filter(Event.id == event_id).scalar()

    def refresh_totals(self, db: Session, event_id: int) -> None:
        """Recompute denormalized request and like totals from song requests."""
        request_total = (
            select(func.count(SongRequest.id)).where(SongRequest.event_id == event_id).scalar_subquery()
        )
        like_total = (
            select(func.coalesce(func.sum(SongRequest.like_count), 0))
            .where(SongRequest.event_id == event_id)
            .scalar_subquery()
        )
        db.query(Event).filter(Event.id == event_id).update(
            {Event.total_song_requests: request_total, Event.total_likes: like_total},
            synchronize_session=False,
        )


event_crud = EventCRUD(Event)
