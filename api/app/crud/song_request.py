"""Song request CRUD helpers"""

import logging
from datetime import datetime
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.crud.base import BaseCRUD
from app.models.base import utcnow
from app.models.enums import OUTSTANDING_STATUSES, SongStatus
from app.models.song_request import SongRequest
from app.models.song_request_like import SongRequestLike
from app.schemas.song_request import SongRequestCreate, SongRequestQuery, SongRequestUpdate

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "created_at": SongRequest.created_at,
    "priority": SongRequest.priority,
    "like_count": SongRequest.like_count,
    "title": SongRequest.title,
}


class SongRequestCRUD(BaseCRUD[SongRequest, SongRequestCreate, SongRequestUpdate]):
    def get_for_event(self, db: Session, event_id: int, request_id: int) -> Optional[SongRequest]:
        """Return the request only when it belongs to the event."""
        return (
            db.query(SongRequest)
            .filter(SongRequest.id == request_id, SongRequest.event_id == event_id)
            .first()
        )

    def transition(
        self,
        db: Session,
        request_id: int,
        expected: Iterable[str],
        values: dict[str, Any],
    ) -> bool:
        """Apply values only while the request is still in an expected status.

        Returns False when no row matched, which means another writer moved the
        request first (or it never was in an expected status).
        """
        expected_statuses = [getattr(status, "value", status) for status in expected]
        payload = {**values, "updated_at": values.get("updated_at", utcnow())}
        try:
            updated = (
                db.query(SongRequest)
                .filter(
                    SongRequest.id == request_id,
                    SongRequest.status.in_(expected_statuses),
                )
                .update(payload, synchronize_session=False)
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error transitioning SongRequest {request_id}: {e}")
            raise
        return updated == 1

    def find_duplicate(
        self,
        db: Session,
        event_id: int,
        requested_by_id: int,
        *,
        title: str,
        artist: str,
        spotify_id: str | None = None,
        youtube_id: str | None = None,
        apple_music_id: str | None = None,
    ) -> Optional[SongRequest]:
        """Return a live request by the same person for the same song."""
        matches = [
            and_(
                func.lower(SongRequest.title) == title.strip().lower(),
                func.lower(SongRequest.artist) == artist.strip().lower(),
            )
        ]
        if spotify_id:
            matches.append(SongRequest.spotify_id == spotify_id)
        if youtube_id:
            matches.append(SongRequest.youtube_id == youtube_id)
        if apple_music_id:
            matches.append(SongRequest.apple_music_id == apple_music_id)
        return (
            db.query(SongRequest)
            .filter(
                SongRequest.event_id == event_id,
                SongRequest.requested_by_id == requested_by_id,
                SongRequest.status != SongStatus.rejected.value,
                or_(*matches),
            )
            .first()
        )

    def count_outstanding(self, db: Session, event_id: int, requested_by_id: int) -> int:
        """Count Pending and Approved requests the person holds in the event."""
        return (
            db.query(SongRequest)
            .filter(
                SongRequest.event_id == event_id,
                SongRequest.requested_by_id == requested_by_id,
                SongRequest.status.in_(OUTSTANDING_STATUSES),
            )
            .count()
        )

    def list_for_event(
        self,
        db: Session,
        event_id: int,
        params: SongRequestQuery,
    ) -> tuple[int, list[SongRequest]]:
        """Return one page of requests for an event matching the typed filters."""
        query = db.query(SongRequest).filter(SongRequest.event_id == event_id)
        if params.status is not None:
            query = query.filter(SongRequest.status == params.status.value)
        if params.priority is not None:
            query = query.filter(SongRequest.priority == params.priority)
        if params.requested_by_id is not None:
            query = query.filter(SongRequest.requested_by_id == params.requested_by_id)
        if params.search:
            pattern = f"%{params.search.strip()}%"
            query = query.filter(
                or_(
                    SongRequest.title.ilike(pattern),
                    SongRequest.artist.ilike(pattern),
                    SongRequest.album.ilike(pattern),
                )
            )
        column = SORT_COLUMNS[params.sort.lstrip("-")]
        ordering = column.desc() if params.sort.startswith("-") else column.asc()
        query = query.order_by(ordering, SongRequest.id.asc())
        return self.paginate(query, params.page, params.limit)

    def review_queue(self, db: Session, event_id: int) -> Sequence[SongRequest]:
        """Pending requests, highest priority and most liked first."""
        return (
            db.query(SongRequest)
            .filter(
                SongRequest.event_id == event_id,
                SongRequest.status == SongStatus.pending.value,
            )
            .order_by(
                SongRequest.priority.desc(),
                SongRequest.like_count.desc(),
                SongRequest.created_at.asc(),
                SongRequest.id.asc(),
            )
            .all()
        )

    def playback_queue(self, db: Session, event_id: int) -> Sequence[SongRequest]:
        """Approved requests in approval order."""
        return (
            db.query(SongRequest)
            .filter(
                SongRequest.event_id == event_id,
                SongRequest.status == SongStatus.approved.value,
            )
            .order_by(SongRequest.queue_position.asc(), SongRequest.id.asc())
            .all()
        )

    def active_time_bombs(self, db: Session, event_id: int, now: datetime) -> Sequence[SongRequest]:
        """Unexpired TimeBomb requests, soonest deadline first."""
        return (
            db.query(SongRequest)
            .filter(
                SongRequest.event_id == event_id,
                SongRequest.status.in_(OUTSTANDING_STATUSES),
                SongRequest.is_time_bomb.is_(True),
                SongRequest.time_bomb_expires_at > now,
            )
            .order_by(SongRequest.time_bomb_expires_at.asc(), SongRequest.id.asc())
            .all()
        )

    def expired_time_bombs(
        self,
        db: Session,
        now: datetime,
        event_id: int | None = None,
    ) -> Sequence[SongRequest]:
        """Pending TimeBomb requests whose deadline has passed."""
        query = db.query(SongRequest).filter(
            SongRequest.status == SongStatus.pending.value,
            SongRequest.is_time_bomb.is_(True),
            SongRequest.time_bomb_expires_at <= now,
        )
        if event_id is not None:
            query = query.filter(SongRequest.event_id == event_id)
        return query.order_by(SongRequest.time_bomb_expires_at.asc(), SongRequest.id.asc()).all()

    def refresh_like_count(self, db: Session, request_id: int) -> bool:
        """Recompute like_count from the like rows. Returns False when the request is gone."""
        like_total = (
            select(func.count(SongRequestLike.id))
            .where(SongRequestLike.song_request_id == request_id)
            .scalar_subquery()
        )
        updated = db.query(SongRequest).filter(SongRequest.id == request_id).update(
            {SongRequest.like_count: like_total},
            synchronize_session=False,
        )
        return updated == 1

    def stats_by_status(self, db: Session, event_id: int) -> list[tuple[str, int, int]]:
        """Return (status, count, total likes) rows for the event."""
        rows = (
            db.query(
                SongRequest.status,
                func.count(SongRequest.id),
                func.coalesce(func.sum(SongRequest.like_count), 0),
            )
            .filter(SongRequest.event_id == event_id)
            .group_by(SongRequest.status)
            .order_by(SongRequest.status.asc())
            .all()
        )
        return [(status, int(count), int(likes)) for status, count, likes in rows]

    def stats_by_priority(self, db: Session, event_id: int) -> list[tuple[int, int]]:
        """Return (priority, count) rows for the event, highest priority first."""
        rows = (
            db.query(SongRequest.priority, func.count(SongRequest.id))
            .filter(SongRequest.event_id == event_id)
            .group_by(SongRequest.priority)
            .order_by(SongRequest.priority.desc())
            .all()
        )
        return [(int(priority), int(count)) for priority, count in rows]

    def count_by_requester(self, db: Session, event_id: int) -> dict[int, int]:
        """Return requested_by_id -> request count for the event."""
        rows = (
            db.query(SongRequest.requested_by_id, func.count(SongRequest.id))
            .filter(SongRequest.event_id == event_id)
            .group_by(SongRequest.requested_by_id)
            .all()
        )
        return {person_id: int(count) for person_id, count in rows}


song_request_crud = SongRequestCRUD(SongRequest)
