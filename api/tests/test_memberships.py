from app.crud.event_member import event_member_crud
from app.models.enums import Role
from app.services import memberships

from conftest import add_member, create_event, create_person


def _events_url(event_id, suffix=""):
    return f"/api/v1/events/{event_id}{suffix}"


def _guest_payload(email, last_name="Guest"):
    return {"email": email, "first_name": "Gina", "last_name": last_name}


def test_join_public_event(login, db_session, manager, outsider):
    event = create_event(db_session, manager)
    response = login(outsider).post(_events_url(event.id, "/join"))
    assert response.status_code == 200
    assert response.json()["person_id"] == outsider.id
    assert response.json()["is_approved"] is True
    assert event_member_crud.is_approved_member(db_session, event.id, outsider.id)


def test_join_twice_conflicts(login, db_session, manager, outsider):
    event = create_event(db_session, manager)
    client = login(outsider)
    client.post(_events_url(event.id, "/join"))
    response = client.post(_events_url(event.id, "/join"))
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "ALREADY_JOINED"


def test_join_requiring_approval_starts_unapproved(login, db_session, manager, outsider):
    event = create_event(db_session, manager, requires_approval=True)
    response = login(outsider).post(_events_url(event.id, "/join"))
    assert response.json()["is_approved"] is False

    denied = login(outsider).post(_events_url(event.id, "/song-requests"), json={"title": "Song", "artist": "Band"})
    assert denied.status_code == 403

    approved = login(manager).post(_events_url(event.id, f"/members/{outsider.id}/approve"))
    assert approved.status_code == 200
    assert approved.json()["is_approved"] is True

    allowed = login(outsider).post(_events_url(event.id, "/song-requests"), json={"title": "Song", "artist": "Band"})
    assert allowed.status_code == 200


def test_join_draft_event_not_allowed(login, db_session, manager, outsider):
    event = create_event(db_session, manager, status="Draft")
    response = login(outsider).post(_events_url(event.id, "/join"))
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "EVENT_NOT_ACTIVE"


def test_join_full_event(login, db_session, manager, member, outsider):
    event = create_event(db_session, manager, max_members=1)
    add_member(db_session, event, member)
    response = login(outsider).post(_events_url(event.id, "/join"))
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "EVENT_FULL"


def test_join_private_event_hidden(login, private_event, outsider):
    response = login(outsider).post(_events_url(private_event.id, "/join"))
    assert response.status_code == 404


def test_leave_event(login, db_session, event, member):
    response = login(member).post(_events_url(event.id, "/leave"))
    assert response.status_code == 204
    assert event_member_crud.get_member(db_session, event.id, member.id) is None


def test_leave_without_membership_forbidden(login, event, outsider):
    response = login(outsider).post(_events_url(event.id, "/leave"))
    assert response.status_code == 403


def test_guest_join_and_approval_flow(login, db_session, manager):
    event = create_event(db_session, manager, requires_approval=True)
    guest = create_person(db_session, Role.guest)
    client = login(None)

    joined = client.post(_events_url(event.id, "/join-guest"), json=_guest_payload(guest.email.upper()))
    assert joined.status_code == 200
    participant = joined.json()
    assert participant["email"] == guest.email
    assert participant["is_approved"] is False

    again = client.post(_events_url(event.id, "/join-guest"), json=_guest_payload(guest.email))
    assert again.status_code == 409

    song = {"title": "Guest song", "artist": "Guest band"}
    assert login(guest).post(_events_url(event.id, "/song-requests"), json=song).status_code == 403

    approved = login(manager).post(_events_url(event.id, f"/participants/{participant['id']}/approve"))
    assert approved.status_code == 200
    assert approved.json()["is_approved"] is True

    created = login(guest).post(_events_url(event.id, "/song-requests"), json=song)
    assert created.status_code == 200
    assert created.json()["requested_by_id"] == guest.id


def test_guest_join_private_event_hidden(login, private_event):
    response = login(None).post(
        _events_url(private_event.id, "/join-guest"),
        json=_guest_payload("someone@example.com"),
    )
    assert response.status_code == 404


def test_guest_join_rejects_invalid_email(login, event):
    response = login(None).post(_events_url(event.id, "/join-guest"), json=_guest_payload("not-an-email"))
    assert response.status_code == 422


def test_manager_lists_members_with_request_counts(login, event, manager, member, other_member):
    login(member).post(_events_url(event.id, "/song-requests"), json={"title": "A", "artist": "B"})
    login(member).post(_events_url(event.id, "/song-requests"), json={"title": "C", "artist": "D"})

    response = login(manager).get(_events_url(event.id, "/members"))
    assert response.status_code == 200
    counts = {row["person_id"]: row["request_count"] for row in response.json()}
    assert counts == {member.id: 2, other_member.id: 0}


def test_members_listing_is_manager_only(login, event, member):
    assert login(member).get(_events_url(event.id, "/members")).status_code == 403
    assert login(member).get(_events_url(event.id, "/participants")).status_code == 403


def test_manager_adds_member_to_private_event(login, private_event, manager, outsider):
    response = login(manager).post(_events_url(private_event.id, "/members"), json={"person_id": outsider.id})
    assert response.status_code == 200
    assert response.json()["person_id"] == outsider.id

    assert login(outsider).get(_events_url(private_event.id)).status_code == 200

    duplicate = login(manager).post(_events_url(private_event.id, "/members"), json={"person_id": outsider.id})
    assert duplicate.status_code == 409


def test_manager_lists_participants(login, db_session, manager):
    event = create_event(db_session, manager)
    login(None).post(_events_url(event.id, "/join-guest"), json=_guest_payload("listed@example.com"))
    response = login(manager).get(_events_url(event.id, "/participants"))
    assert response.status_code == 200
    assert [row["email"] for row in response.json()] == ["listed@example.com"]


def test_event_manager_lookup(db_session, event, manager):
    assert memberships.event_manager(db_session, event.id) == manager.id


def test_approved_participant_lookup(db_session, event, member, outsider):
    assert memberships.is_approved_participant(db_session, member, event) is True
    assert memberships.is_approved_participant(db_session, outsider, event) is False
    assert memberships.is_approved_participant(db_session, None, event) is False
