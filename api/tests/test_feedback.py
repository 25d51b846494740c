from app.crud.event_feedback import event_feedback_crud

from conftest import create_event


def _url(event_id, suffix=""):
    return f"/api/v1/events/{event_id}/feedback{suffix}"


def _feedback(client, event_id, rating=5, comment="Great music all night long", **extra):
    return client.post(_url(event_id), json={"rating": rating, "comment": comment, **extra})


def test_anonymous_feedback_on_public_event(login, db_session, event):
    response = _feedback(login(None), event.id, rating=4, comment="  Loved the first dance set  ")
    assert response.status_code == 200
    data = response.json()
    assert data["rating"] == 4
    assert data["comment"] == "Loved the first dance set"
    assert data["display_name"] == "Anonymous"
    assert data["is_approved"] is True

    stored = event_feedback_crud.get(db_session, data["id"])
    assert stored.submitted_by_id is None
    assert stored.ip_address == "testclient"


def test_signed_in_feedback_defaults_to_first_name(login, event, member):
    response = _feedback(login(member), event.id)
    assert response.json()["display_name"] == member.first_name

    named = _feedback(login(member), event.id, first_name="  Kim ")
    assert named.json()["first_name"] == "Kim"


def test_feedback_validation(login, event):
    client = login(None)
    assert _feedback(client, event.id, rating=0).status_code == 422
    assert _feedback(client, event.id, rating=6).status_code == 422
    assert _feedback(client, event.id, comment="   too short   ").status_code == 422
    assert _feedback(client, event.id, comment="x" * 1001).status_code == 422
    assert _feedback(client, event.id, first_name="n" * 51).status_code == 422


def test_feedback_closed_for_draft_event(login, db_session, manager):
    draft = create_event(db_session, manager, status="Draft")
    response = _feedback(login(None), draft.id)
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "EVENT_NOT_ACTIVE"


def test_feedback_on_private_event_hidden(login, private_event, member, outsider):
    assert _feedback(login(outsider), private_event.id).status_code == 404
    assert _feedback(login(None), private_event.id).status_code == 404
    assert _feedback(login(member), private_event.id).status_code == 200


def test_feedback_awaits_approval_when_event_requires_it(login, db_session, manager):
    moderated = create_event(db_session, manager, requires_approval=True)
    created = _feedback(login(None), moderated.id).json()
    assert created["is_approved"] is False

    public_view = login(None)
    assert public_view.get(_url(moderated.id)).json()["total"] == 0
    assert public_view.get(_url(moderated.id, f"/{created['id']}")).status_code == 404

    client = login(manager)
    assert client.get(_url(moderated.id)).json()["total"] == 1
    assert client.get(_url(moderated.id), params={"approved": "false"}).json()["total"] == 1

    approved = client.post(_url(moderated.id, f"/{created['id']}/approve"))
    assert approved.status_code == 200
    assert approved.json()["is_approved"] is True

    public_view = login(None)
    assert public_view.get(_url(moderated.id, f"/{created['id']}")).status_code == 200
    assert public_view.get(_url(moderated.id)).json()["total"] == 1


def test_list_feedback_filters_and_sorts(login, db_session, manager):
    rated = create_event(db_session, manager)
    client = login(None)
    low = _feedback(client, rated.id, rating=2, comment="Too loud for my taste").json()
    high = _feedback(client, rated.id, rating=5, comment="Best wedding playlist ever").json()
    mid = _feedback(client, rated.id, rating=3, comment="Decent mix of old and new").json()

    newest = client.get(_url(rated.id)).json()
    assert newest["total"] == 3
    assert [item["id"] for item in newest["items"]] == [mid["id"], high["id"], low["id"]]

    by_rating = client.get(_url(rated.id), params={"sort": "rating-high"}).json()
    assert [item["rating"] for item in by_rating["items"]] == [5, 3, 2]

    oldest = client.get(_url(rated.id), params={"sort": "oldest", "limit": 2}).json()
    assert [item["id"] for item in oldest["items"]] == [low["id"], high["id"]]
    assert oldest["total"] == 3

    only_fives = client.get(_url(rated.id), params={"rating": 5}).json()
    assert [item["id"] for item in only_fives["items"]] == [high["id"]]


def test_non_manager_cannot_list_unapproved(login, db_session, manager, member):
    moderated = create_event(db_session, manager, requires_approval=True)
    _feedback(login(None), moderated.id)
    response = login(member).get(_url(moderated.id), params={"approved": "false"})
    assert response.json()["total"] == 0


def test_feedback_stats(login, db_session, manager, member):
    rated = create_event(db_session, manager)
    client = login(None)
    for rating in (5, 4, 4):
        _feedback(client, rated.id, rating=rating)
    hidden = _feedback(client, rated.id, rating=1).json()
    event_feedback_crud.update(db_session, event_feedback_crud.get(db_session, hidden["id"]), {"is_approved": False})

    response = login(manager).get(_url(rated.id, "/stats"))
    assert response.status_code == 200
    stats = response.json()
    assert stats["total_feedback"] == 3
    assert stats["average_rating"] == 4.3
    assert stats["rating_distribution"] == {"1": 0, "2": 0, "3": 0, "4": 2, "5": 1}

    assert login(member).get(_url(rated.id, "/stats")).status_code == 403


def test_feedback_stats_empty(login, db_session, manager):
    quiet = create_event(db_session, manager)
    stats = login(manager).get(_url(quiet.id, "/stats")).json()
    assert stats["total_feedback"] == 0
    assert stats["average_rating"] == 0.0
    assert stats["rating_distribution"] == {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}


def test_manager_deletes_feedback(login, db_session, event, manager, member):
    created = _feedback(login(member), event.id).json()

    assert login(member).delete(_url(event.id, f"/{created['id']}")).status_code == 403
    assert login(None).post(_url(event.id, f"/{created['id']}/approve")).status_code == 401

    client = login(manager)
    assert client.delete(_url(event.id, f"/{created['id']}")).status_code == 204
    assert event_feedback_crud.get(db_session, created["id"]) is None
    assert client.delete(_url(event.id, f"/{created['id']}")).status_code == 404


def test_feedback_from_other_event_not_found(login, db_session, event, manager):
    created = _feedback(login(None), event.id).json()
    other = create_event(db_session, manager)
    assert login(manager).get(_url(other.id, f"/{created['id']}")).status_code == 404
