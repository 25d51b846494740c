from datetime import timedelta
import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from app.crud.event import event_crud
from app.crud.event_participant import event_participant_crud
from app.crud.song_request import song_request_crud
from app.crud.song_request_like import song_request_like_crud
from app.models.base import utcnow
from app.models.enums import Role
from app.schemas.event import EventQuery

from conftest import add_member, create_event, create_person


def _song(db_session, event, person, title, **overrides):
    data = {
        "event_id": event.id,
        "requested_by_id": person.id,
        "title": title,
        "artist": overrides.pop("artist", "Artist"),
        "status": overrides.pop("status", "Pending"),
    }
    data.update(overrides)
    return song_request_crud.create(db_session, data)


def test_next_queue_position_is_monotonic(db_session, event):
    assert event_crud.next_queue_position(db_session, event.id) == 1
    assert event_crud.next_queue_position(db_session, event.id) == 2
    assert event_crud.next_queue_position(db_session, event.id, hint=7) == 7
    assert event_crud.next_queue_position(db_session, event.id, hint=3) == 8
    db_session.commit()


def test_transition_only_matches_expected_status(db_session, event, member):
    song = _song(db_session, event, member, "Guarded")
    assert song_request_crud.transition(db_session, song.id, ["Approved"], {"status": "Played"}) is False
    assert song_request_crud.transition(db_session, song.id, ["Pending"], {"status": "Approved"}) is True
    db_session.commit()
    db_session.refresh(song)
    assert song.status == "Approved"


def test_find_duplicate_ignores_rejected_and_other_requesters(db_session, event, member, other_member):
    _song(db_session, event, member, "Hey Jude", artist="The Beatles", youtube_id="yt-1")
    _song(db_session, event, member, "Yesterday", artist="The Beatles", status="Rejected")

    assert song_request_crud.find_duplicate(db_session, event.id, member.id, title=" hey jude", artist="the beatles")
    assert song_request_crud.find_duplicate(
        db_session, event.id, member.id, title="Other", artist="Other", youtube_id="yt-1"
    )
    assert song_request_crud.find_duplicate(db_session, event.id, member.id, title="Yesterday", artist="The Beatles") is None
    assert song_request_crud.find_duplicate(db_session, event.id, other_member.id, title="Hey Jude", artist="The Beatles") is None


def test_count_outstanding(db_session, event, member):
    _song(db_session, event, member, "One")
    _song(db_session, event, member, "Two", status="Approved")
    _song(db_session, event, member, "Three", status="Played")
    _song(db_session, event, member, "Four", status="Rejected")
    assert song_request_crud.count_outstanding(db_session, event.id, member.id) == 2


def test_expired_time_bombs_only_pending(db_session, event, member):
    now = utcnow()
    overdue = _song(db_session, event, member, "Overdue", is_time_bomb=True, time_bomb_expires_at=now - timedelta(minutes=1))
    _song(db_session, event, member, "Approved", status="Approved", is_time_bomb=True, time_bomb_expires_at=now - timedelta(minutes=1))
    _song(db_session, event, member, "Later", is_time_bomb=True, time_bomb_expires_at=now + timedelta(minutes=5))
    expired = song_request_crud.expired_time_bombs(db_session, now, event_id=event.id)
    assert [item.id for item in expired] == [overdue.id]


def test_like_is_unique_per_person(db_session, event, member):
    song = _song(db_session, event, member, "Liked once")
    song_request_like_crud.create(db_session, {"song_request_id": song.id, "person_id": member.id})
    with pytest.raises(IntegrityError):
        song_request_like_crud.create(db_session, {"song_request_id": song.id, "person_id": member.id})
    assert song_request_like_crud.liker_ids(db_session, song.id) == [member.id]


def test_refresh_like_count(db_session, event, member, other_member):
    song = _song(db_session, event, member, "Counted")
    song_request_like_crud.create(db_session, {"song_request_id": song.id, "person_id": member.id})
    song_request_like_crud.create(db_session, {"song_request_id": song.id, "person_id": other_member.id})
    song_request_crud.refresh_like_count(db_session, song.id)
    event_crud.refresh_totals(db_session, event.id)
    db_session.commit()
    db_session.refresh(song)
    db_session.refresh(event)
    assert song.like_count == 2
    assert event.total_likes == 2
    assert event.total_song_requests == 1


def test_guest_visibility_by_approved_email(db_session, manager):
    private = create_event(db_session, manager, is_public=False, name=f"Hidden {uuid.uuid4().hex[:8]}")
    guest = create_person(db_session, Role.guest)
    params = EventQuery(search=private.name)

    total, _ = event_crud.list_visible(db_session, guest, params)
    assert total == 0

    event_participant_crud.create(
        db_session,
        {"event_id": private.id, "email": guest.email, "first_name": "G", "last_name": "Uest"},
    )
    total, items = event_crud.list_visible(db_session, guest, params)
    assert [item.id for item in items] == [private.id]


def test_unapproved_member_does_not_see_private_event(db_session, manager, member):
    private = create_event(db_session, manager, is_public=False, name=f"Pending {uuid.uuid4().hex[:8]}")
    add_member(db_session, private, member, is_approved=False)
    total, _ = event_crud.list_visible(db_session, member, EventQuery(search=private.name))
    assert total == 0
