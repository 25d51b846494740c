"""Person model"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel
from app.models.enums import Role

if TYPE_CHECKING:
    from app.models.event import Event
    from app.models.event_member import EventMember
    from app.models.song_request_like import SongRequestLike


class Person(BaseModel):
    """Registered identity with exactly one application role"""

    __tablename__ = "persons"

    email: Mapped[str] = mapped_column(unique=True, index=True, nullable=False)
    first_name: Mapped[str] = mapped_column(nullable=False)
    last_name: Mapped[str] = mapped_column(nullable=False)
    role: Mapped[str] = mapped_column(default=Role.member.value, index=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, index=True, nullable=False)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    managed_events: Mapped[list["Event"]] = relationship(
        back_populates="manager",
        foreign_keys="Event.manager_id",
    )
    memberships: Mapped[list["EventMember"]] = relationship(
        back_populates="person",
        cascade="all, delete-orphan",
    )
    likes: Mapped[list["SongRequestLike"]] = relationship(
        back_populates="person",
        cascade="all, delete-orphan",
    )
