"""Enumerations shared by models, schemas and services"""

from enum import Enum


class Role(str, Enum):
    admin = "Admin"
    manager = "Manager"
    member = "Member"
    guest = "Guest"


class EventType(str, Enum):
    wedding = "Wedding"
    birthday = "Birthday"
    corporate = "Corporate"
    club = "Club"
    festival = "Festival"
    private = "Private"
    other = "Other"


class EventStatus(str, Enum):
    draft = "Draft"
    published = "Published"
    active = "Active"
    paused = "Paused"
    completed = "Completed"
    cancelled = "Cancelled"


class SongStatus(str, Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"
    played = "Played"
    skipped = "Skipped"


OUTSTANDING_STATUSES = (SongStatus.pending.value, SongStatus.approved.value)
