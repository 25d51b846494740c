"""Event feedback models"""

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.event import Event

ANONYMOUS_NAME = "Anonymous"


class EventFeedback(BaseModel):
    """A star rating with a comment left on an event, optionally signed with a first name."""

    __tablename__ = "event_feedback"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_event_feedback_rating"),
        Index("ix_event_feedback_event_created", "event_id", "created_at"),
    )

    event_id: Mapped[int] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    submitted_by_id: Mapped[int | None] = mapped_column(ForeignKey("persons.id", ondelete="SET NULL"))
    first_name: Mapped[str | None] = mapped_column(String(50))
    rating: Mapped[int] = mapped_column(nullable=False, index=True)
    comment: Mapped[str] = mapped_column(String(1000), nullable=False)
    is_approved: Mapped[bool] = mapped_column(default=True, nullable=False)
    ip_address: Mapped[str | None]

    event: Mapped["Event"] = relationship(back_populates="feedback")

    @property
    def display_name(self) -> str:
        return self.first_name or ANONYMOUS_NAME
