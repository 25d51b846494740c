"""Helpers for normalizing stored timestamps."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def ensure_utc(value: Any) -> datetime | None:
    """Normalize datetime-like values into a timezone-aware UTC datetime."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    return None


def remaining_seconds(deadline: Any, now: datetime) -> int:
    """Return whole seconds left until the deadline, never negative."""
    expires_at = ensure_utc(deadline)
    if expires_at is None:
        return 0
    delta = (expires_at - ensure_utc(now)).total_seconds()
    return max(0, int(delta))
