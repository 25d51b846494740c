"""Song request models"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel
from app.models.enums import SongStatus

if TYPE_CHECKING:
    from app.models.event import Event
    from app.models.person import Person
    from app.models.song_request_like import SongRequestLike


class SongRequest(BaseModel):
    """A participant's nomination of a song for an event."""

    __tablename__ = "song_requests"
    __table_args__ = (
        Index("ix_song_requests_event_status", "event_id", "status"),
        Index("ix_song_requests_event_queue_position", "event_id", "queue_position"),
        Index("ix_song_requests_event_priority_likes", "event_id", "priority", "like_count"),
        Index("ix_song_requests_time_bomb", "is_time_bomb", "time_bomb_expires_at"),
        Index("ix_song_requests_event_title_artist", "event_id", "title", "artist"),
    )

    # Song details
    title: Mapped[str] = mapped_column(nullable=False)
    artist: Mapped[str] = mapped_column(nullable=False)
    album: Mapped[str | None]
    genre: Mapped[str | None]
    duration: Mapped[int | None]
    spotify_id: Mapped[str | None]
    youtube_id: Mapped[str | None]
    apple_music_id: Mapped[str | None]
    request_note: Mapped[str | None]
    dj_note: Mapped[str | None]

    event_id: Mapped[int] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    requested_by_id: Mapped[int] = mapped_column(
        ForeignKey("persons.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(default=SongStatus.pending.value, nullable=False, index=True)
    priority: Mapped[int] = mapped_column(default=0, nullable=False)
    queue_position: Mapped[int | None]
    like_count: Mapped[int] = mapped_column(default=0, nullable=False)

    # TimeBomb
    is_time_bomb: Mapped[bool] = mapped_column(default=False, nullable=False)
    time_bomb_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    time_bomb_amount: Mapped[float | None]

    # Resolution metadata
    approved_by_id: Mapped[int | None] = mapped_column(ForeignKey("persons.id", ondelete="SET NULL"))
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rejected_by_id: Mapped[int | None] = mapped_column(ForeignKey("persons.id", ondelete="SET NULL"))
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rejection_reason: Mapped[str | None]
    played_by_id: Mapped[int | None] = mapped_column(ForeignKey("persons.id", ondelete="SET NULL"))
    played_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    play_duration: Mapped[int | None]
    skipped_by_id: Mapped[int | None] = mapped_column(ForeignKey("persons.id", ondelete="SET NULL"))
    skipped_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    updated_by_id: Mapped[int | None] = mapped_column(ForeignKey("persons.id", ondelete="SET NULL"))

    event: Mapped["Event"] = relationship(back_populates="song_requests")
    requested_by: Mapped["Person"] = relationship(foreign_keys=[requested_by_id])
    likes: Mapped[list["SongRequestLike"]] = relationship(
        back_populates="song_request",
        cascade="all, delete-orphan",
        order_by="SongRequestLike.liked_at",
    )

    @property
    def full_song_name(self) -> str:
        return f"{self.artist} - {self.title}"
