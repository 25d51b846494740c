"""Event schemas"""

from datetime import datetime
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.enums import EventStatus, EventType
from app.models.event import DEFAULT_TIME_BOMB_MINUTES, TIME_BOMB_MAX_MINUTES, TIME_BOMB_MIN_MINUTES

EventSort = Literal["start_date", "-start_date", "created_at", "-created_at", "name", "-name"]


class EventSettingsFields(BaseModel):
    max_members: int | None = Field(default=None, ge=1, le=10000)
    is_public: bool = True
    requires_approval: bool = False
    max_songs_per_user: int = Field(5, ge=1, le=50)
    allow_duplicates: bool = False
    time_bomb_enabled: bool = False
    time_bomb_duration: int | None = Field(
        DEFAULT_TIME_BOMB_MINUTES, ge=TIME_BOMB_MIN_MINUTES, le=TIME_BOMB_MAX_MINUTES
    )


class EventCreate(EventSettingsFields):
    name: str = Field(..., min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    event_type: EventType = EventType.other
    start_date: datetime
    end_date: datetime
    venue_name: str | None = Field(default=None, max_length=100)
    venue_city: str | None = Field(default=None, max_length=50)
    manager_id: int | None = None

    @model_validator(mode="after")
    def check_event_window(self) -> "EventCreate":
        if self.start_date >= self.end_date:
            raise ValueError("End date must be after start date")
        if self.time_bomb_enabled and not self.time_bomb_duration:
            raise ValueError("TimeBomb duration is required when TimeBomb is enabled")
        return self


class EventUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    event_type: EventType | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    venue_name: str | None = Field(default=None, max_length=100)
    venue_city: str | None = Field(default=None, max_length=50)
    manager_id: int | None = None
    max_members: int | None = Field(default=None, ge=1, le=10000)
    is_public: bool | None = None
    requires_approval: bool | None = None
    max_songs_per_user: int | None = Field(default=None, ge=1, le=50)
    allow_duplicates: bool | None = None
    time_bomb_enabled: bool | None = None
    time_bomb_duration: int | None = Field(default=None, ge=TIME_BOMB_MIN_MINUTES, le=TIME_BOMB_MAX_MINUTES)


class EventStatusUpdate(BaseModel):
    status: EventStatus


class EventQuery(BaseModel):
    """Typed filter set for listing events."""

    status: EventStatus | None = None
    event_type: EventType | None = None
    manager_id: int | None = None
    search: str | None = Field(default=None, max_length=100)
    sort: EventSort = "start_date"
    page: int = Field(1, ge=1)
    limit: int = Field(25, ge=1, le=100)


class EventOut(EventSettingsFields):
    id: int
    name: str
    description: str | None = None
    event_type: EventType
    status: EventStatus
    start_date: datetime
    end_date: datetime
    venue_name: str | None = None
    venue_city: str | None = None
    manager_id: int
    created_by_id: int | None = None
    total_song_requests: int
    total_likes: int
    member_count: int = 0
    guest_member_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EventListOut(BaseModel):
    total: int
    page: int
    limit: int
    items: list[EventOut]
