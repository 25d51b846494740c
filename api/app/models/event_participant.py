"""Guest participant models"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel, utcnow

if TYPE_CHECKING:
    from app.models.event import Event


class EventParticipant(BaseModel):
    """Unauthenticated guest who joined an event with email and name."""

    __tablename__ = "event_participants"
    __table_args__ = (
        UniqueConstraint("event_id", "email", "last_name", name="uq_event_participant_identity"),
    )

    event_id: Mapped[int] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    email: Mapped[str] = mapped_column(nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(nullable=False)
    last_name: Mapped[str] = mapped_column(nullable=False)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    is_approved: Mapped[bool] = mapped_column(default=True, nullable=False)

    event: Mapped["Event"] = relationship(back_populates="participants")
