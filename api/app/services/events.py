"""Event management: creation, settings, status changes and deletion."""

import logging

from sqlalchemy.orm import Session

from app.crud.event import event_crud
from app.crud.event_member import event_member_crud
from app.crud.event_participant import event_participant_crud
from app.crud.person import person_crud
from app.models.enums import EventStatus, Role
from app.models.event import Event
from app.models.person import Person
from app.schemas.event import EventCreate, EventListOut, EventOut, EventQuery, EventUpdate
from app.services.authorization import Action, is_admin, require
from app.services.errors import Forbidden, InvalidTransition, Unauthorized, ValidationError
from app.services.memberships import load_event
from app.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)

EVENT_TRANSITIONS: dict[EventStatus, frozenset[EventStatus]] = {
    EventStatus.draft: frozenset({EventStatus.published, EventStatus.cancelled}),
    EventStatus.published: frozenset({EventStatus.active, EventStatus.draft, EventStatus.cancelled}),
    EventStatus.active: frozenset({EventStatus.paused, EventStatus.completed, EventStatus.cancelled}),
    EventStatus.paused: frozenset({EventStatus.active, EventStatus.completed, EventStatus.cancelled}),
    EventStatus.completed: frozenset(),
    EventStatus.cancelled: frozenset(),
}

MANAGER_ROLES = (Role.manager.value, Role.admin.value)


def can_change_status(current: EventStatus | str, target: EventStatus | str) -> bool:
    return EventStatus(target) in EVENT_TRANSITIONS[EventStatus(current)]


def to_event_out(db: Session, event: Event) -> EventOut:
    out = EventOut.model_validate(event)
    return out.model_copy(
        update={
            "member_count": event_member_crud.count_members(db, event.id),
            "guest_member_count": event_participant_crud.count_for_event(db, event.id),
        }
    )


def _resolve_manager_id(db: Session, principal: Person, manager_id: int | None) -> int:
    if manager_id is None or manager_id == principal.id:
        return principal.id
    if not is_admin(principal):
        raise Forbidden("Only an admin can assign an event to another manager")
    manager = person_crud.get_active(db, manager_id)
    if not manager or manager.role not in MANAGER_ROLES:
        raise ValidationError("Event manager must be an active Manager or Admin", field="manager_id")
    return manager.id


def create_event(db: Session, principal: Person, payload: EventCreate) -> Event:
    """Create a Draft event owned by the principal or an admin-chosen manager."""
    if not principal.is_active:
        raise Unauthorized("Account is inactive")
    if principal.role not in MANAGER_ROLES:
        raise Forbidden("Only managers can create events")
    data = payload.model_dump()
    data["manager_id"] = _resolve_manager_id(db, principal, payload.manager_id)
    data["created_by_id"] = principal.id
    data["status"] = EventStatus.draft.value
    data["event_type"] = payload.event_type.value
    event = event_crud.create(db, data)
    logger.info("Event %s created by %s", event.id, principal.id)
    return event


def get_event(db: Session, principal: Person | None, event_id: int) -> Event:
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.view_event, is_participant=participant)
    return event


def list_events(db: Session, principal: Person | None, params: EventQuery) -> EventListOut:
    total, items = event_crud.list_visible(db, principal, params)
    return EventListOut(
        total=total,
        page=params.page,
        limit=params.limit,
        items=[to_event_out(db, event) for event in items],
    )


def update_event(db: Session, principal: Person, event_id: int, payload: EventUpdate) -> Event:
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.manage_event, is_participant=participant)

    changes = payload.model_dump(exclude_unset=True)
    for key in ("name", "start_date", "end_date", "is_public", "requires_approval",
                "max_songs_per_user", "allow_duplicates", "time_bomb_enabled", "manager_id"):
        if key in changes and changes[key] is None:
            raise ValidationError(f"{key} cannot be null", field=key)
    if "manager_id" in changes:
        changes["manager_id"] = _resolve_manager_id(db, principal, changes["manager_id"])
    if changes.get("event_type") is not None:
        changes["event_type"] = changes["event_type"].value

    start = ensure_utc(changes.get("start_date", event.start_date))
    end = ensure_utc(changes.get("end_date", event.end_date))
    if start >= end:
        raise ValidationError("End date must be after start date", field="end_date")
    time_bomb_enabled = changes.get("time_bomb_enabled", event.time_bomb_enabled)
    time_bomb_duration = changes.get("time_bomb_duration", event.time_bomb_duration)
    if time_bomb_enabled and not time_bomb_duration:
        raise ValidationError("TimeBomb duration is required when TimeBomb is enabled", field="time_bomb_duration")

    event = event_crud.update(db, event, changes)
    logger.info("Event %s updated by %s", event.id, principal.id)
    return event


def change_status(db: Session, principal: Person, event_id: int, target: EventStatus) -> Event:
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.manage_event, is_participant=participant)
    if not can_change_status(event.status, target):
        raise InvalidTransition(
            "change status",
            event.status,
            message=f"Cannot move event from {event.status} to {target.value}",
        )
    previous = event.status
    event = event_crud.update(db, event, {"status": target.value})
    logger.info("Event %s moved from %s to %s by %s", event.id, previous, event.status, principal.id)
    return event


def delete_event(db: Session, principal: Person, event_id: int) -> None:
    """Delete the event together with its roster, guests, requests and likes."""
    event, participant = load_event(db, principal, event_id)
    require(principal, event, Action.manage_event, is_participant=participant)
    event_crud.delete(db, event.id)
    logger.info("Event %s deleted by %s", event_id, principal.id)
