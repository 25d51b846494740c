"""Event membership routes."""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user
from app.db.session import get_db
from app.models.person import Person
from app.schemas.event_member import EventMemberCreate, EventMemberOut, EventParticipantOut, GuestJoin
from app.services import memberships

router = APIRouter(prefix="/events/{event_id}", tags=["members"])


def _member_out(member, person: Person) -> EventMemberOut:
    return EventMemberOut(
        person_id=member.person_id,
        first_name=person.first_name,
        last_name=person.last_name,
        role=person.role,
        joined_at=member.joined_at,
        is_approved=member.is_approved,
    )


@router.post("/join", response_model=EventMemberOut)
def join_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    """Join the event roster as the authenticated person."""
    member = memberships.join_event(db, current_user, event_id)
    return _member_out(member, current_user)


@router.post("/leave", status_code=status.HTTP_204_NO_CONTENT)
def leave_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    memberships.leave_event(db, current_user, event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/join-guest", response_model=EventParticipantOut)
def join_event_as_guest(
    event_id: int,
    payload: GuestJoin,
    db: Session = Depends(get_db),
):
    """Join a public event with email and name, no account needed."""
    return memberships.join_as_guest(db, event_id, payload)


@router.get("/members", response_model=list[EventMemberOut])
def list_event_members(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    return memberships.list_members(db, current_user, event_id)


@router.post("/members", response_model=EventMemberOut)
def add_event_member(
    event_id: int,
    payload: EventMemberCreate,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    """Add a registered person to the roster (event manager only)."""
    member = memberships.add_member(
        db,
        current_user,
        event_id,
        payload.person_id,
        is_approved=payload.is_approved,
    )
    return _member_out(member, member.person)


@router.post("/members/{person_id}/approve", response_model=EventMemberOut)
def approve_event_member(
    event_id: int,
    person_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    member = memberships.approve_member(db, current_user, event_id, person_id)
    return _member_out(member, member.person)


@router.get("/participants", response_model=list[EventParticipantOut])
def list_event_participants(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    """List guest participants (event manager only)."""
    return memberships.list_participants(db, current_user, event_id)


@router.post("/participants/{participant_id}/approve", response_model=EventParticipantOut)
def approve_event_participant(
    event_id: int,
    participant_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    return memberships.approve_participant(db, current_user, event_id, participant_id)
