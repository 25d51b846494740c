"""Event-scoped authorization policy.

``can_perform`` is a pure function of the principal, the event and facts the
caller already looked up (participant status, request ownership). It is
evaluated on every command and never cached.

Principals who cannot see a private event get ``NotFound`` on every path so
the event's existence is not leaked. Principals who can see the event but
lack the privilege get ``Forbidden``.
"""

from dataclasses import dataclass
from enum import Enum

from app.models.enums import Role
from app.models.event import Event
from app.models.person import Person
from app.services.errors import DomainError, Forbidden, NotFound, Unauthorized


class Action(str, Enum):
    view_event = "view_event"
    join_event = "join_event"
    leave_event = "leave_event"
    create_request = "create_request"
    like_request = "like_request"
    update_request = "update_request"
    delete_request = "delete_request"
    moderate_request = "moderate_request"
    view_review_queue = "view_review_queue"
    view_time_bombs = "view_time_bombs"
    view_stats = "view_stats"
    manage_event = "manage_event"
    manage_members = "manage_members"


PARTICIPANT_ACTIONS = frozenset({Action.create_request, Action.like_request, Action.leave_event})
OWNER_ACTIONS = frozenset({Action.update_request, Action.delete_request})
MANAGER_ACTIONS = frozenset(
    {
        Action.moderate_request,
        Action.view_review_queue,
        Action.view_time_bombs,
        Action.view_stats,
        Action.manage_event,
        Action.manage_members,
    }
)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    error: type[DomainError] | None = None
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def _deny(error: type[DomainError], reason: str) -> Decision:
    return Decision(False, error, reason)


def is_admin(principal: Person | None) -> bool:
    return principal is not None and principal.role == Role.admin.value


def is_event_manager(principal: Person | None, event: Event) -> bool:
    """Return whether the principal manages this particular event."""
    if principal is None:
        return False
    if principal.role not in (Role.manager.value, Role.admin.value):
        return False
    return event.manager_id == principal.id


def can_view(principal: Person | None, event: Event, *, is_participant: bool = False) -> bool:
    if event.is_public or is_admin(principal):
        return True
    return is_event_manager(principal, event) or (principal is not None and is_participant)


def can_perform(
    principal: Person | None,
    event: Event,
    action: Action,
    *,
    is_participant: bool = False,
    owns_request: bool = False,
) -> Decision:
    """Decide whether the principal may perform the action on the event."""
    if principal is None:
        if not event.is_public:
            return _deny(NotFound, "Event not found")
        if action == Action.view_event:
            return ALLOW
        return _deny(Unauthorized, "Authentication required")

    if not principal.is_active:
        return _deny(Unauthorized, "Account is inactive")
    if is_admin(principal):
        return ALLOW
    if not can_view(principal, event, is_participant=is_participant):
        return _deny(NotFound, "Event not found")

    manager = is_event_manager(principal, event)
    if action == Action.view_event:
        return ALLOW
    if action == Action.join_event:
        if event.is_public or manager:
            return ALLOW
        return _deny(Forbidden, "Private event rosters are managed by the event manager")
    if action in PARTICIPANT_ACTIONS:
        if manager or is_participant:
            return ALLOW
        return _deny(Forbidden, "Only approved participants can do this")
    if action in OWNER_ACTIONS:
        if manager or owns_request:
            return ALLOW
        return _deny(Forbidden, "Only the requester or the event manager can do this")
    if action in MANAGER_ACTIONS:
        if manager:
            return ALLOW
        return _deny(Forbidden, "Only the event manager can do this")
    return _deny(Forbidden, f"Unknown action '{action}'")


def require(
    principal: Person | None,
    event: Event,
    action: Action,
    *,
    is_participant: bool = False,
    owns_request: bool = False,
) -> None:
    """Raise the decision's error when the action is not permitted."""
    decision = can_perform(
        principal,
        event,
        action,
        is_participant=is_participant,
        owns_request=owns_request,
    )
    if not decision:
        raise decision.error(decision.reason)
