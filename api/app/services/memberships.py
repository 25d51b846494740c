"""Event membership: roster members, guest participants and visibility lookups."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.crud.event import event_crud
from app.crud.event_member import event_member_crud
from app.crud.event_participant import event_participant_crud
from app.crud.person import person_crud
from app.crud.song_request import song_request_crud
from app.models.enums import EventStatus, Role
from app.models.event import Event
from app.models.event_member import EventMember
from app.models.event_participant import EventParticipant
from app.models.person import Person
from app.schemas.event_member import EventMemberOut, GuestJoin
from app.services.authorization import Action, can_view, is_event_manager, require
from app.services.errors import AlreadyJoined, EventFull, EventNotActive, NotFound

logger = logging.getLogger(__name__)

JOINABLE_STATUSES = (EventStatus.published.value, EventStatus.active.value)


def is_approved_participant(db: Session, principal: Person | None, event: Event) -> bool:
    """Return whether the principal is an approved member or guest of the event."""
    if principal is None:
        return False
    if event_member_crud.is_approved_member(db, event.id, principal.id):
        return True
    if principal.role == Role.guest.value:
        return event_participant_crud.has_approved_email(db, event.id, principal.email)
    return False


def event_manager(db: Session, event_id: int) -> int:
    """Return the id of the person managing the event."""
    event = event_crud.get(db, event_id)
    if not event:
        raise NotFound("Event not found")
    return event.manager_id


def load_event(db: Session, principal: Person | None, event_id: int) -> tuple[Event, bool]:
    """Load an event visible to the principal along with its participant flag."""
    event = event_crud.get(db, event_id)
    if not event:
        raise NotFound("Event not found")
    participant = is_approved_participant(db, principal, event)
    if not can_view(principal, event, is_participant=participant):
        raise NotFound("Event not found")
    return event, participant


def _ensure_joinable(event: Event) -> None:
    if event.status not in JOINABLE_STATUSES:
        raise EventNotActive("Cannot join an event that is not published or active")


def _ensure_roster_capacity(db: Session, event: Event) -> None:
    if event.max_members and event_member_crud.count_members(db, event.id) >= event.max_members:
        raise EventFull("Event is full")


def _create_member(db: Session, event: Event, person_id: int, is_approved: bool) -> EventMember:
    try:
        return event_member_crud.create(
            db,
            {"event_id": event.id, "person_id": person_id, "is_approved": is_approved},
        )
    except IntegrityError as exc:
        raise AlreadyJoined("Already joined this event") from exc


def join_event(db: Session, principal: Person, event_id: int) -> EventMember:
    """Add the principal to the event roster."""
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.join_event, is_participant=participant)
    _ensure_joinable(event)
    if event_member_crud.get_member(db, event.id, principal.id):
        raise AlreadyJoined("Already joined this event")
    _ensure_roster_capacity(db, event)
    is_approved = is_event_manager(principal, event) or not event.requires_approval
    member = _create_member(db, event, principal.id, is_approved)
    logger.info("Person %s joined event %s (approved=%s)", principal.id, event.id, is_approved)
    return member


def leave_event(db: Session, principal: Person, event_id: int) -> None:
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.leave_event, is_participant=participant)
    member = event_member_crud.get_member(db, event.id, principal.id)
    if not member:
        raise NotFound("Not a member of this event")
    event_member_crud.delete(db, member.id)
    logger.info("Person %s left event %s", principal.id, event.id)


def join_as_guest(db: Session, event_id: int, payload: GuestJoin) -> EventParticipant:
    """Register an unauthenticated guest; private events are hidden."""
    event = event_crud.get(db, event_id)
    if not event or not event.is_public:
        raise NotFound("Event not found")
    _ensure_joinable(event)
    if event_participant_crud.get_by_identity(db, event.id, payload.email, payload.last_name):
        raise AlreadyJoined("A guest with this email and last name already joined this event")
    if event.max_members and event_participant_crud.count_for_event(db, event.id) >= event.max_members:
        raise EventFull("Event is full")
    try:
        participant = event_participant_crud.create(
            db,
            {
                "event_id": event.id,
                "email": payload.email,
                "first_name": payload.first_name,
                "last_name": payload.last_name,
                "is_approved": not event.requires_approval,
            },
        )
    except IntegrityError as exc:
        raise AlreadyJoined("A guest with this email and last name already joined this event") from exc
    logger.info("Guest %s joined event %s (approved=%s)", participant.id, event.id, participant.is_approved)
    return participant


def add_member(
    db: Session,
    principal: Person,
    event_id: int,
    person_id: int,
    *,
    is_approved: bool = True,
) -> EventMember:
    """Manager adds a registered person to the roster."""
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.manage_members, is_participant=participant)
    if not person_crud.get(db, person_id):
        raise NotFound("Person not found")
    if event_member_crud.get_member(db, event.id, person_id):
        raise AlreadyJoined("Person is already a member of this event")
    _ensure_roster_capacity(db, event)
    return _create_member(db, event, person_id, is_approved)


def approve_member(db: Session, principal: Person, event_id: int, person_id: int) -> EventMember:
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.manage_members, is_participant=participant)
    member = event_member_crud.get_member(db, event.id, person_id)
    if not member:
        raise NotFound("Member not found")
    return event_member_crud.update(db, member, {"is_approved": True})


def approve_participant(db: Session, principal: Person, event_id: int, participant_id: int) -> EventParticipant:
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.manage_members, is_participant=participant)
    guest = event_participant_crud.get_for_event(db, event.id, participant_id)
    if not guest:
        raise NotFound("Participant not found")
    return event_participant_crud.update(db, guest, {"is_approved": True})


def list_members(db: Session, principal: Person, event_id: int) -> list[EventMemberOut]:
    """List the roster with per-member request counts."""
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.manage_members, is_participant=participant)
    counts = song_request_crud.count_by_requester(db, event.id)
    return [
        EventMemberOut(
            person_id=member.person_id,
            first_name=person.first_name,
            last_name=person.last_name,
            role=person.role,
            joined_at=member.joined_at,
            is_approved=member.is_approved,
            request_count=counts.get(member.person_id, 0),
        )
        for member, person in event_member_crud.list_members(db, event.id)
    ]


def list_participants(db: Session, principal: Person, event_id: int) -> list[EventParticipant]:
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.manage_members, is_participant=participant)
    return list(event_participant_crud.list_for_event(db, event.id))
