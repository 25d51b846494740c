"""Event roster models"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel, utcnow

if TYPE_CHECKING:
    from app.models.event import Event
    from app.models.person import Person


class EventMember(BaseModel):
    """Registered person on an event roster."""

    __tablename__ = "event_members"
    __table_args__ = (UniqueConstraint("event_id", "person_id", name="uq_event_member"),)

    event_id: Mapped[int] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    person_id: Mapped[int] = mapped_column(ForeignKey("persons.id", ondelete="CASCADE"), nullable=False, index=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    is_approved: Mapped[bool] = mapped_column(default=True, nullable=False)

    event: Mapped["Event"] = relationship(back_populates="members")
    person: Mapped["Person"] = relationship(back_populates="memberships")
