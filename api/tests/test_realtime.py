import asyncio

import pytest

from app.realtime.socket_server import authorize_room_join, parse_event_id, room_join_ack
from app.services.broadcaster import (
    SONG_REQUEST_CREATED,
    DomainEvent,
    SocketIOBroadcaster,
    event_room,
    song_request_event,
)
from app.services.errors import NotFound, Unauthorized, ValidationError


class FakeServer:
    def __init__(self, fail=False):
        self.fail = fail
        self.emitted = []

    async def emit(self, name, payload, room=None):
        if self.fail:
            raise RuntimeError("socket down")
        self.emitted.append((name, payload, room))


def test_song_request_event_payload():
    event = song_request_event(SONG_REQUEST_CREATED, 7, {"id": 3}, action="liked")
    assert event.room == "event_7"
    assert event.payload == {"songRequest": {"id": 3}, "eventId": 7, "action": "liked"}


def test_socketio_broadcaster_emits_to_event_room():
    server = FakeServer()
    asyncio.run(SocketIOBroadcaster(server).publish(DomainEvent("songRequestCreated", 4, {"eventId": 4})))
    assert server.emitted == [("songRequestCreated", {"eventId": 4}, event_room(4))]


def test_socketio_broadcaster_logs_emit_failures():
    server = FakeServer(fail=True)
    asyncio.run(SocketIOBroadcaster(server).publish(DomainEvent("songRequestCreated", 4)))
    assert server.emitted == []


def test_parse_event_id():
    assert parse_event_id({"eventId": "12"}) == 12
    assert parse_event_id(5) == 5
    with pytest.raises(ValidationError):
        parse_event_id({"eventId": None})
    with pytest.raises(ValidationError):
        parse_event_id({})


def test_room_join_public_event(db_session, event, outsider):
    assert authorize_room_join(db_session, None, event.id) == f"event_{event.id}"
    assert authorize_room_join(db_session, outsider.id, event.id) == f"event_{event.id}"


def test_room_join_private_event(db_session, private_event, member, outsider):
    assert authorize_room_join(db_session, member.id, private_event.id) == f"event_{private_event.id}"
    with pytest.raises(NotFound):
        authorize_room_join(db_session, outsider.id, private_event.id)
    with pytest.raises(NotFound):
        authorize_room_join(db_session, None, private_event.id)


def test_room_join_unknown_person(db_session, event):
    with pytest.raises(Unauthorized):
        authorize_room_join(db_session, 987654321, event.id)


def test_room_join_ack_flags_event_manager(db_session, event, manager, member):
    assert room_join_ack(db_session, manager.id, event.id) == {"eventId": event.id, "isManager": True}
    assert room_join_ack(db_session, member.id, event.id) == {"eventId": event.id, "isManager": False}
    assert room_join_ack(db_session, None, event.id)["isManager"] is False
