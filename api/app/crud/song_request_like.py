"""Song request like CRUD helpers"""
from typing import Optional
from sqlalchemy.orm import Session

from app.crud.base import BaseCRUD
from app.models.song_request_like import SongRequestLike


class SongRequestLikeCRUD(BaseCRUD[SongRequestLike, dict, dict]):
    def get_like(self, db: Session, song_request_id: int, person_id: int) -> Optional[SongRequestLike]:
        """Return an existing like row for person/request."""
        return (
            db.query(SongRequestLike)
            .filter(
                SongRequestLike.song_request_id == song_request_id,
                SongRequestLike.person_id == person_id,
            )
            .first()
        )

    def count_likes(self, db: Session, song_request_id: int) -> int:
        return db.query(SongRequestLike).filter(SongRequestLike.song_request_id == song_request_id).count()

    def liker_ids(self, db: Session, song_request_id: int) -> list[int]:
        """Return ids of people who liked the request, oldest first."""
        rows = (
            db.query(SongRequestLike.person_id)
            .filter(SongRequestLike.song_request_id == song_request_id)
            .order_by(SongRequestLike.liked_at.asc(), SongRequestLike.id.asc())
            .all()
        )
        return [person_id for (person_id,) in rows]


song_request_like_crud = SongRequestLikeCRUD(SongRequestLike)
