from app.models.base import BaseModel
from app.models.person import Person
from app.models.event import Event
from app.models.event_member import EventMember
from app.models.event_participant import EventParticipant
from app.models.song_request import SongRequest
from app.models.song_request_like import SongRequestLike
from app.models.event_feedback import EventFeedback

__all__ = [
    "BaseModel",
    "Person",
    "Event",
    "EventMember",
    "EventParticipant",
    "SongRequest",
    "SongRequestLike",
    "EventFeedback",
]
