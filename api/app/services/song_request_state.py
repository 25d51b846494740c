"""Pure status transition rules for song requests."""

from datetime import datetime, timedelta

from app.models.enums import SongStatus
from app.services.errors import InvalidTransition
from app.utils.datetime import ensure_utc

TRANSITIONS: dict[SongStatus, frozenset[SongStatus]] = {
    SongStatus.pending: frozenset({SongStatus.approved, SongStatus.rejected}),
    SongStatus.approved: frozenset({SongStatus.played, SongStatus.skipped, SongStatus.rejected}),
    SongStatus.rejected: frozenset(),
    SongStatus.played: frozenset(),
    SongStatus.skipped: frozenset(),
}

OPERATION_TARGETS = {
    "approve": SongStatus.approved,
    "reject": SongStatus.rejected,
    "play": SongStatus.played,
    "skip": SongStatus.skipped,
}

EDITABLE_STATUSES = frozenset({SongStatus.pending})

OWNER_EDITABLE_FIELDS = frozenset({"title", "artist", "album", "genre", "duration", "request_note"})
MANAGER_EDITABLE_FIELDS = OWNER_EDITABLE_FIELDS | {"priority", "dj_note"}

TIME_BOMB_EXPIRED_REASON = "timebomb_expired"


def is_terminal(current: SongStatus | str) -> bool:
    return not TRANSITIONS[SongStatus(current)]


def can_transition(current: SongStatus | str, target: SongStatus | str) -> bool:
    return SongStatus(target) in TRANSITIONS[SongStatus(current)]


def source_statuses(target: SongStatus | str) -> tuple[SongStatus, ...]:
    """Return every status from which the target can be reached."""
    target = SongStatus(target)
    return tuple(status for status, targets in TRANSITIONS.items() if target in targets)


def ensure_transition(operation: str, current: SongStatus | str) -> SongStatus:
    """Return the target status for the operation or raise InvalidTransition."""
    target = OPERATION_TARGETS[operation]
    if not can_transition(current, target):
        raise InvalidTransition(operation, SongStatus(current).value)
    return target


def ensure_editable(current: SongStatus | str) -> None:
    if SongStatus(current) not in EDITABLE_STATUSES:
        raise InvalidTransition("update", SongStatus(current).value)


def editable_fields(*, is_manager: bool) -> frozenset[str]:
    return MANAGER_EDITABLE_FIELDS if is_manager else OWNER_EDITABLE_FIELDS


def time_bomb_deadline(
    created_at: datetime,
    *,
    requested: bool,
    enabled: bool,
    duration_minutes: int | None,
) -> datetime | None:
    """Return the expiry for a new request, or None when it is not a TimeBomb."""
    if not (requested and enabled and duration_minutes):
        return None
    return ensure_utc(created_at) + timedelta(minutes=duration_minutes)


def is_time_bomb_active(
    *,
    is_time_bomb: bool,
    status: SongStatus | str,
    expires_at: datetime | None,
    now: datetime,
) -> bool:
    """Derived read-time flag: flagged, outstanding and not yet expired."""
    if not is_time_bomb or expires_at is None:
        return False
    if SongStatus(status) not in (SongStatus.pending, SongStatus.approved):
        return False
    return ensure_utc(expires_at) > ensure_utc(now)


def is_time_bomb_expired(
    *,
    is_time_bomb: bool,
    status: SongStatus | str,
    expires_at: datetime | None,
    now: datetime,
) -> bool:
    if not is_time_bomb or expires_at is None:
        return False
    return SongStatus(status) == SongStatus.pending and ensure_utc(expires_at) <= ensure_utc(now)
