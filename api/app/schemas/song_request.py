"""Song request schemas"""

from datetime import datetime
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.enums import SongStatus

LikeAction = Literal["liked", "unliked"]
SongRequestSort = Literal[
    "created_at",
    "-created_at",
    "priority",
    "-priority",
    "like_count",
    "-like_count",
    "title",
    "-title",
]


class SongFields(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    artist: str = Field(..., min_length=1, max_length=200)
    album: str | None = Field(default=None, max_length=200)
    genre: str | None = Field(default=None, max_length=50)
    duration: int | None = Field(default=None, ge=1, le=3600)
    spotify_id: str | None = Field(default=None, max_length=100)
    youtube_id: str | None = Field(default=None, max_length=100)
    apple_music_id: str | None = Field(default=None, max_length=100)
    request_note: str | None = Field(default=None, max_length=500)

    @field_validator("title", "artist", mode="after")
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Value cannot be blank")
        return stripped

    @field_validator("spotify_id", "youtube_id", "apple_music_id", mode="after")
    @classmethod
    def blank_ids_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class SongRequestCreate(SongFields):
    is_time_bomb: bool = False
    time_bomb_amount: float | None = Field(default=None, ge=0)


class SongRequestUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    artist: str | None = Field(default=None, min_length=1, max_length=200)
    album: str | None = Field(default=None, max_length=200)
    genre: str | None = Field(default=None, max_length=50)
    duration: int | None = Field(default=None, ge=1, le=3600)
    request_note: str | None = Field(default=None, max_length=500)
    priority: int | None = Field(default=None, ge=0, le=10)
    dj_note: str | None = Field(default=None, max_length=500)


class SongRequestApprove(BaseModel):
    queue_position: int | None = Field(default=None, ge=1)


class SongRequestReject(BaseModel):
    reason: str | None = Field(default=None, max_length=200)


class SongRequestPlayed(BaseModel):
    duration: int | None = Field(default=None, ge=0)


class SongRequestQuery(BaseModel):
    """Typed filter set for listing song requests of an event."""

    status: SongStatus | None = None
    priority: int | None = Field(default=None, ge=0)
    requested_by_id: int | None = None
    search: str | None = Field(default=None, max_length=100)
    sort: SongRequestSort = "-created_at"
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)


class SongRequestLikeOut(BaseModel):
    person_id: int
    liked_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SongRequestOut(BaseModel):
    id: int
    event_id: int
    requested_by_id: int
    title: str
    artist: str
    album: str | None = None
    genre: str | None = None
    duration: int | None = None
    spotify_id: str | None = None
    youtube_id: str | None = None
    apple_music_id: str | None = None
    request_note: str | None = None
    dj_note: str | None = None
    status: SongStatus
    priority: int
    queue_position: int | None = None
    like_count: int
    likes: list[SongRequestLikeOut] = Field(default_factory=list)
    is_time_bomb: bool
    time_bomb_expires_at: datetime | None = None
    time_bomb_amount: float | None = None
    is_time_bomb_active: bool = False
    time_bomb_remaining_seconds: int = 0
    approved_by_id: int | None = None
    approved_at: datetime | None = None
    rejected_by_id: int | None = None
    rejected_at: datetime | None = None
    rejection_reason: str | None = None
    played_by_id: int | None = None
    played_at: datetime | None = None
    play_duration: int | None = None
    skipped_by_id: int | None = None
    skipped_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SongRequestListOut(BaseModel):
    total: int
    page: int
    limit: int
    items: list[SongRequestOut]


class LikeToggleOut(BaseModel):
    action: LikeAction
    like_count: int
    song_request: SongRequestOut


class StatusStatOut(BaseModel):
    status: SongStatus
    count: int
    total_likes: int


class PriorityStatOut(BaseModel):
    priority: int
    count: int


class EventStatsOut(BaseModel):
    event_id: int
    total_requests: int
    total_likes: int
    by_status: list[StatusStatOut]
    by_priority: list[PriorityStatOut]
