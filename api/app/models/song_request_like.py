"""Song request like models"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel, utcnow

if TYPE_CHECKING:
    from app.models.person import Person
    from app.models.song_request import SongRequest


class SongRequestLike(BaseModel):
    """One like per person per song request."""

    __tablename__ = "song_request_likes"
    __table_args__ = (UniqueConstraint("song_request_id", "person_id", name="uq_song_request_like"),)

    song_request_id: Mapped[int] = mapped_column(
        ForeignKey("song_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    person_id: Mapped[int] = mapped_column(ForeignKey("persons.id", ondelete="CASCADE"), nullable=False, index=True)
    liked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    song_request: Mapped["SongRequest"] = relationship(back_populates="likes")
    person: Mapped["Person"] = relationship(back_populates="likes")
