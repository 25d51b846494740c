"""Event roster and guest participant schemas"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class EventMemberCreate(BaseModel):
    person_id: int
    is_approved: bool = True


class EventMemberOut(BaseModel):
    person_id: int
    first_name: str
    last_name: str
    role: str
    joined_at: datetime
    is_approved: bool
    request_count: int = 0


class GuestJoin(BaseModel):
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("first_name", "last_name", mode="after")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Name cannot be blank")
        return stripped


class EventParticipantOut(BaseModel):
    id: int
    event_id: int
    email: str
    first_name: str
    last_name: str
    joined_at: datetime
    is_approved: bool

    model_config = ConfigDict(from_attributes=True)
