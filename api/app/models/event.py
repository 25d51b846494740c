"""Event models"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel
from app.models.enums import EventStatus, EventType

if TYPE_CHECKING:
    from app.models.event_feedback import EventFeedback
    from app.models.event_member import EventMember
    from app.models.event_participant import EventParticipant
    from app.models.person import Person
    from app.models.song_request import SongRequest

TIME_BOMB_MIN_MINUTES = 5
TIME_BOMB_MAX_MINUTES = 180
DEFAULT_TIME_BOMB_MINUTES = 30


class Event(BaseModel):
    """A scheduled gathering with song-request activity, owned by one manager."""

    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("start_date < end_date", name="ck_events_date_range"),
        Index("ix_events_manager_status", "manager_id", "status"),
    )

    name: Mapped[str] = mapped_column(nullable=False)
    description: Mapped[str | None]
    event_type: Mapped[str] = mapped_column(default=EventType.other.value, nullable=False)
    status: Mapped[str] = mapped_column(default=EventStatus.draft.value, index=True, nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    venue_name: Mapped[str | None]
    venue_city: Mapped[str | None]

    manager_id: Mapped[int] = mapped_column(ForeignKey("persons.id"), nullable=False, index=True)
    created_by_id: Mapped[int | None] = mapped_column(ForeignKey("persons.id", ondelete="SET NULL"))

    max_members: Mapped[int | None]
    is_public: Mapped[bool] = mapped_column(default=True, index=True, nullable=False)
    requires_approval: Mapped[bool] = mapped_column(default=False, nullable=False)
    max_songs_per_user: Mapped[int] = mapped_column(default=5, nullable=False)
    allow_duplicates: Mapped[bool] = mapped_column(default=False, nullable=False)
    time_bomb_enabled: Mapped[bool] = mapped_column(default=False, nullable=False)
    time_bomb_duration: Mapped[int | None] = mapped_column(default=DEFAULT_TIME_BOMB_MINUTES)

    # Highest queue position handed out so far; only ever grows.
    queue_sequence: Mapped[int] = mapped_column(default=0, nullable=False)
    total_song_requests: Mapped[int] = mapped_column(default=0, nullable=False)
    total_likes: Mapped[int] = mapped_column(default=0, nullable=False)

    manager: Mapped["Person"] = relationship(back_populates="managed_events", foreign_keys=[manager_id])
    members: Mapped[list["EventMember"]] = relationship(
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="EventMember.joined_at",
    )
    participants: Mapped[list["EventParticipant"]] = relationship(
        back_populates="event",
        cascade="all, delete-orphan",
    )
    song_requests: Mapped[list["SongRequest"]] = relationship(
        back_populates="event",
        cascade="all, delete-orphan",
    )
    feedback: Mapped[list["EventFeedback"]] = relationship(
        back_populates="event",
        cascade="all, delete-orphan",
    )

    @property
    def is_active(self) -> bool:
        return self.status == EventStatus.active.value
