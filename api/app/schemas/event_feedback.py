"""Event feedback schemas"""

from datetime import datetime
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator

FeedbackSort = Literal["newest", "oldest", "rating-high", "rating-low"]

MIN_COMMENT_LENGTH = 10


class EventFeedbackCreate(BaseModel):
    first_name: str | None = Field(default=None, max_length=50)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., max_length=1000)

    @field_validator("first_name", mode="after")
    @classmethod
    def blank_name_is_anonymous(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("comment", mode="after")
    @classmethod
    def strip_comment(cls, v: str) -> str:
        stripped = v.strip()
        if len(stripped) < MIN_COMMENT_LENGTH:
            raise ValueError(f"Comment must be at least {MIN_COMMENT_LENGTH} characters")
        return stripped


class EventFeedbackOut(BaseModel):
    id: int
    event_id: int
    first_name: str | None = None
    display_name: str
    rating: int
    comment: str
    is_approved: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EventFeedbackQuery(BaseModel):
    """Typed filter set for listing feedback."""

    rating: int | None = Field(default=None, ge=1, le=5)
    approved: bool | None = None
    sort: FeedbackSort = "newest"
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)


class EventFeedbackListOut(BaseModel):
    total: int
    page: int
    limit: int
    items: list[EventFeedbackOut]


class FeedbackStatsOut(BaseModel):
    event_id: int
    total_feedback: int
    average_rating: float
    rating_distribution: dict[int, int]
