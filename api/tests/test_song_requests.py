from app.auth.dependencies import AUTH_EXPIRED_HEADER
from app.crud.event import event_crud
from app.crud.song_request import song_request_crud
from app.services import broadcaster as events

from conftest import add_member, create_event


def _url(event_id, suffix=""):
    return f"/api/v1/events/{event_id}/song-requests{suffix}"


def _request_song(client, event_id, title="Dancing Queen", artist="ABBA", **extra):
    return client.post(_url(event_id), json={"title": title, "artist": artist, **extra})


def test_create_song_request(login, broadcaster, event, member):
    client = login(member)
    response = _request_song(client, event.id, title="  Dancing Queen ", request_note="For the bride")
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Dancing Queen"
    assert data["status"] == "Pending"
    assert data["requested_by_id"] == member.id
    assert data["queue_position"] is None
    assert data["like_count"] == 0
    assert data["is_time_bomb"] is False

    assert broadcaster.names() == [events.SONG_REQUEST_CREATED]
    published = broadcaster.last()
    assert published.room == f"event_{event.id}"
    assert published.payload["eventId"] == event.id
    assert published.payload["songRequest"]["id"] == data["id"]


def test_create_updates_event_totals(login, db_session, event, member):
    client = login(member)
    _request_song(client, event.id, title="One")
    _request_song(client, event.id, title="Two")
    db_session.refresh(event)
    assert event.total_song_requests == 2


def test_create_requires_authentication(login, event):
    client = login(None)
    response = _request_song(client, event.id)
    assert response.status_code == 401
    assert response.headers.get(AUTH_EXPIRED_HEADER) == "1"


def test_create_requires_participant(login, event, outsider):
    client = login(outsider)
    response = _request_song(client, event.id)
    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "FORBIDDEN"


def test_create_requires_active_event(login, db_session, manager, member):
    paused = create_event(db_session, manager, status="Paused")
    add_member(db_session, paused, member)
    client = login(member)
    response = _request_song(client, paused.id)
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "EVENT_NOT_ACTIVE"


def test_event_manager_can_request_without_membership(login, event, manager):
    client = login(manager)
    response = _request_song(client, event.id)
    assert response.status_code == 200


def test_request_limit_counts_outstanding_requests(login, db_session, manager, member):
    limited = create_event(db_session, manager, max_songs_per_user=2)
    add_member(db_session, limited, member)
    client = login(member)
    first = _request_song(client, limited.id, title="One").json()
    assert _request_song(client, limited.id, title="Two").status_code == 200

    response = _request_song(client, limited.id, title="Three")
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "LIMIT_EXCEEDED"

    login(manager).post(_url(limited.id, f"/{first['id']}/reject"), json={"reason": "Not tonight"})
    client = login(member)
    assert _request_song(client, limited.id, title="Three").status_code == 200


def test_duplicate_request_rejected(login, event, member, other_member):
    client = login(member)
    assert _request_song(client, event.id).status_code == 200
    response = _request_song(client, event.id, title="dancing queen", artist="abba")
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "DUPLICATE_REQUEST"

    client = login(other_member)
    assert _request_song(client, event.id).status_code == 200


def test_duplicate_by_external_id(login, event, member):
    client = login(member)
    assert _request_song(client, event.id, spotify_id="sp-1").status_code == 200
    response = _request_song(client, event.id, title="Other title", artist="Other", spotify_id="sp-1")
    assert response.status_code == 409


def test_rejected_request_does_not_block_duplicate(login, event, manager, member):
    created = _request_song(login(member), event.id).json()
    login(manager).post(_url(event.id, f"/{created['id']}/reject"))
    assert _request_song(login(member), event.id).status_code == 200


def test_duplicates_allowed_when_enabled(login, db_session, manager, member):
    relaxed = create_event(db_session, manager, allow_duplicates=True)
    add_member(db_session, relaxed, member)
    client = login(member)
    assert _request_song(client, relaxed.id).status_code == 200
    assert _request_song(client, relaxed.id).status_code == 200


def test_like_toggle(login, broadcaster, db_session, event, member, other_member):
    created = _request_song(login(member), event.id).json()
    client = login(other_member)

    liked = client.post(_url(event.id, f"/{created['id']}/like"))
    assert liked.status_code == 200
    assert liked.json()["action"] == "liked"
    assert liked.json()["like_count"] == 1
    assert liked.json()["song_request"]["likes"][0]["person_id"] == other_member.id

    published = broadcaster.last()
    assert published.name == events.SONG_REQUEST_LIKED
    assert published.payload["action"] == "liked"
    assert published.payload["userId"] == other_member.id

    unliked = client.post(_url(event.id, f"/{created['id']}/like"))
    assert unliked.json()["action"] == "unliked"
    assert unliked.json()["like_count"] == 0
    db_session.refresh(event)
    assert event.total_likes == 0


def test_like_requires_participant(login, event, member, outsider):
    created = _request_song(login(member), event.id).json()
    response = login(outsider).post(_url(event.id, f"/{created['id']}/like"))
    assert response.status_code == 403


def test_approve_assigns_increasing_positions(login, broadcaster, event, manager, member):
    client = login(member)
    ids = [_request_song(client, event.id, title=f"Song {i}").json()["id"] for i in range(3)]

    client = login(manager)
    first = client.post(_url(event.id, f"/{ids[0]}/approve"))
    assert first.status_code == 200
    assert first.json()["status"] == "Approved"
    assert first.json()["queue_position"] == 1
    assert first.json()["approved_by_id"] == manager.id
    assert broadcaster.last().name == events.SONG_REQUEST_APPROVED

    second = client.post(_url(event.id, f"/{ids[1]}/approve")).json()
    assert second["queue_position"] == 2

    assert client.delete(_url(event.id, f"/{ids[1]}")).status_code == 204
    third = client.post(_url(event.id, f"/{ids[2]}/approve")).json()
    assert third["queue_position"] == 3


def test_approve_position_hint(login, event, manager, member):
    client = login(member)
    ids = [_request_song(client, event.id, title=f"Hinted {i}").json()["id"] for i in range(3)]

    client = login(manager)
    assert client.post(_url(event.id, f"/{ids[0]}/approve"), json={"queue_position": 10}).json()["queue_position"] == 10
    assert client.post(_url(event.id, f"/{ids[1]}/approve"), json={"queue_position": 4}).json()["queue_position"] == 11
    assert client.post(_url(event.id, f"/{ids[2]}/approve")).json()["queue_position"] == 12


def test_approve_twice_is_invalid_transition(login, event, manager, member):
    created = _request_song(login(member), event.id).json()
    client = login(manager)
    assert client.post(_url(event.id, f"/{created['id']}/approve")).status_code == 200
    response = client.post(_url(event.id, f"/{created['id']}/approve"))
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "INVALID_TRANSITION"


def test_moderation_requires_event_manager(login, event, member, other_manager):
    created = _request_song(login(member), event.id).json()
    assert login(member).post(_url(event.id, f"/{created['id']}/approve")).status_code == 403
    assert login(other_manager).post(_url(event.id, f"/{created['id']}/approve")).status_code == 403


def test_admin_can_moderate_any_event(login, event, admin, member):
    created = _request_song(login(member), event.id).json()
    response = login(admin).post(_url(event.id, f"/{created['id']}/reject"), json={"reason": "No"})
    assert response.status_code == 200
    assert response.json()["rejected_by_id"] == admin.id


def test_play_and_skip_only_from_approved(login, broadcaster, event, manager, member):
    client = login(member)
    to_play = _request_song(client, event.id, title="Play me").json()
    to_skip = _request_song(client, event.id, title="Skip me").json()

    client = login(manager)
    assert client.post(_url(event.id, f"/{to_play['id']}/play")).status_code == 409

    client.post(_url(event.id, f"/{to_play['id']}/approve"))
    played = client.post(_url(event.id, f"/{to_play['id']}/play"), json={"duration": 215})
    assert played.status_code == 200
    assert played.json()["status"] == "Played"
    assert played.json()["play_duration"] == 215
    assert played.json()["played_by_id"] == manager.id
    assert broadcaster.last().name == events.SONG_REQUEST_PLAYED

    client.post(_url(event.id, f"/{to_skip['id']}/approve"))
    skipped = client.post(_url(event.id, f"/{to_skip['id']}/skip"))
    assert skipped.json()["status"] == "Skipped"
    assert skipped.json()["skipped_by_id"] == manager.id

    for request_id in (to_play["id"], to_skip["id"]):
        for action in ("approve", "reject", "play", "skip"):
            assert client.post(_url(event.id, f"/{request_id}/{action}")).status_code == 409


def test_reject_approved_keeps_queue_position(login, event, manager, member):
    created = _request_song(login(member), event.id).json()
    client = login(manager)
    approved = client.post(_url(event.id, f"/{created['id']}/approve")).json()
    rejected = client.post(_url(event.id, f"/{created['id']}/reject"), json={"reason": "Too slow"}).json()
    assert rejected["status"] == "Rejected"
    assert rejected["rejection_reason"] == "Too slow"
    assert rejected["queue_position"] == approved["queue_position"]


def test_owner_updates_pending_request(login, broadcaster, event, member):
    created = _request_song(login(member), event.id).json()
    response = login(member).patch(_url(event.id, f"/{created['id']}"), json={"title": "Mamma Mia", "genre": "Pop"})
    assert response.status_code == 200
    assert response.json()["title"] == "Mamma Mia"
    assert response.json()["genre"] == "Pop"
    assert broadcaster.last().name == events.SONG_REQUEST_UPDATED


def test_priority_is_manager_only(login, event, manager, member):
    created = _request_song(login(member), event.id).json()
    response = login(member).patch(_url(event.id, f"/{created['id']}"), json={"priority": 5})
    assert response.status_code == 403

    response = login(manager).patch(_url(event.id, f"/{created['id']}"), json={"priority": 5, "dj_note": "After cake"})
    assert response.status_code == 200
    assert response.json()["priority"] == 5
    assert response.json()["dj_note"] == "After cake"


def test_update_rejects_blank_title(login, event, member):
    created = _request_song(login(member), event.id).json()
    response = login(member).patch(_url(event.id, f"/{created['id']}"), json={"title": "   "})
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "VALIDATION_ERROR"


def test_update_after_approval_is_invalid(login, event, manager, member):
    created = _request_song(login(member), event.id).json()
    login(manager).post(_url(event.id, f"/{created['id']}/approve"))
    response = login(member).patch(_url(event.id, f"/{created['id']}"), json={"title": "Too late"})
    assert response.status_code == 409


def test_update_by_other_member_forbidden(login, event, member, other_member):
    created = _request_song(login(member), event.id).json()
    response = login(other_member).patch(_url(event.id, f"/{created['id']}"), json={"title": "Mine now"})
    assert response.status_code == 403


def test_owner_deletes_request(login, broadcaster, db_session, event, member):
    created = _request_song(login(member), event.id).json()
    response = login(member).delete(_url(event.id, f"/{created['id']}"))
    assert response.status_code == 204
    assert song_request_crud.get(db_session, created["id"]) is None
    assert broadcaster.last().name == events.SONG_REQUEST_DELETED
    assert broadcaster.last().payload["songRequest"]["id"] == created["id"]
    db_session.refresh(event)
    assert event.total_song_requests == 0


def test_delete_by_other_member_forbidden(login, event, member, other_member):
    created = _request_song(login(member), event.id).json()
    assert login(other_member).delete(_url(event.id, f"/{created['id']}")).status_code == 403


def test_request_from_other_event_not_found(login, db_session, event, manager, member):
    created = _request_song(login(member), event.id).json()
    other = create_event(db_session, manager)
    response = login(manager).post(_url(other.id, f"/{created['id']}/approve"))
    assert response.status_code == 404


def test_list_song_requests_with_filters(login, event, manager, member, other_member):
    _request_song(login(member), event.id, title="Alpha")
    _request_song(login(member), event.id, title="Beta")
    bravo = _request_song(login(other_member), event.id, title="Bravo").json()
    login(manager).post(_url(event.id, f"/{bravo['id']}/approve"))

    client = login(None)
    data = client.get(_url(event.id), params={"sort": "title"}).json()
    assert data["total"] == 3
    assert [item["title"] for item in data["items"]] == ["Alpha", "Beta", "Bravo"]

    approved = client.get(_url(event.id), params={"status": "Approved"}).json()
    assert [item["id"] for item in approved["items"]] == [bravo["id"]]

    mine = client.get(_url(event.id), params={"requested_by_id": member.id, "search": "alp"}).json()
    assert [item["title"] for item in mine["items"]] == ["Alpha"]

    page = client.get(_url(event.id), params={"sort": "title", "limit": 2, "page": 2}).json()
    assert [item["title"] for item in page["items"]] == ["Bravo"]


def test_queue_position_sequence_persists_on_event(login, db_session, event, manager, member):
    created = _request_song(login(member), event.id).json()
    login(manager).post(_url(event.id, f"/{created['id']}/approve"))
    refreshed = event_crud.get(db_session, event.id)
    db_session.refresh(refreshed)
    assert refreshed.queue_sequence == 1


def test_two_people_like_same_request(login, db_session, event, member, other_member):
    created = _request_song(login(member), event.id, title="Shared favourite").json()

    first = login(other_member).post(_url(event.id, f"/{created['id']}/like"))
    second = login(member).post(_url(event.id, f"/{created['id']}/like"))
    assert first.json()["like_count"] == 1
    assert second.json()["action"] == "liked"
    assert second.json()["like_count"] == 2

    likers = [like["person_id"] for like in second.json()["song_request"]["likes"]]
    assert sorted(likers) == sorted([member.id, other_member.id])
    stored = song_request_crud.get(db_session, created["id"])
    db_session.refresh(stored)
    assert stored.like_count == 2


def test_rejected_request_cannot_be_moderated_again(login, broadcaster, event, manager, member):
    created = _request_song(login(member), event.id, title="Not tonight").json()
    client = login(manager)
    assert client.post(_url(event.id, f"/{created['id']}/reject")).status_code == 200
    broadcaster.events.clear()

    for action in ("approve", "play", "skip", "reject"):
        response = client.post(_url(event.id, f"/{created['id']}/{action}"))
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "INVALID_TRANSITION"
    assert broadcaster.events == []
    assert client.get(_url(event.id, f"/{created['id']}")).json()["status"] == "Rejected"


def test_single_song_limit_walkthrough(login, db_session, manager, member):
    single = create_event(db_session, manager, max_songs_per_user=1)
    add_member(db_session, single, member)

    client = login(member)
    song_a = _request_song(client, single.id, title="Song A")
    assert song_a.status_code == 200
    assert song_a.json()["status"] == "Pending"

    song_b = _request_song(client, single.id, title="Song B")
    assert song_b.status_code == 409
    assert song_b.json()["detail"]["code"] == "LIMIT_EXCEEDED"

    client = login(manager)
    approved = client.post(_url(single.id, f"/{song_a.json()['id']}/approve")).json()
    assert approved["status"] == "Approved"
    assert approved["queue_position"] == 1

    rejected = client.post(_url(single.id, f"/{song_a.json()['id']}/reject"))
    assert rejected.status_code == 200
    assert rejected.json()["status"] == "Rejected"
