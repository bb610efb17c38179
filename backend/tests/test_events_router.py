"""Tests for the event routes and the ownership rules in front of them."""

import pytest

from app.constants import UserRole
from app.models.event import Event
from tests.conftest import bearer, create_user


@pytest.fixture
def people(auth_client, token_service):
    """Owner, stranger, moderator and admin with ready-made access headers."""
    _, db_session_maker = auth_client
    users = {
        "owner": create_user(db_session_maker, "owner@example.com", "owner"),
        "stranger": create_user(db_session_maker, "stranger@example.com", "stranger"),
        "moderator": create_user(
            db_session_maker, "mod@example.com", "moderator", role=UserRole.MODERATOR
        ),
        "admin": create_user(db_session_maker, "admin@example.com", "admin", role=UserRole.ADMIN),
    }
    return {
        name: (user, bearer(token_service.issue_access_token(user))) for name, user in users.items()
    }


def _add_event(db_session_maker, user_id, title="Meetup", published=False) -> str:
    db = db_session_maker()
    event = Event(title=title, user_id=user_id, is_published=published)
    db.add(event)
    db.commit()
    event_id = event.id
    db.close()
    return event_id


def test_create_event(auth_client, people):
    test_client, _ = auth_client
    owner, headers = people["owner"]

    response = test_client.post("/api/events", json={"title": "Jazz night"}, headers=headers)

    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Jazz night"
    assert data["user_id"] == owner.id
    assert data["is_published"] is False


def test_create_event_requires_login(auth_client):
    test_client, _ = auth_client

    response = test_client.post("/api/events", json={"title": "Jazz night"})

    assert response.status_code == 401


def test_owner_can_update(auth_client, people):
    test_client, db_session_maker = auth_client
    owner, headers = people["owner"]
    event_id = _add_event(db_session_maker, owner.id)

    response = test_client.patch(f"/api/events/{event_id}", json={"title": "Renamed"}, headers=headers)

    assert response.status_code == 200
    assert response.json()["title"] == "Renamed"


def test_stranger_cannot_update(auth_client, people):
    test_client, db_session_maker = auth_client
    owner, _ = people["owner"]
    _, stranger_headers = people["stranger"]
    event_id = _add_event(db_session_maker, owner.id)

    response = test_client.patch(
        f"/api/events/{event_id}", json={"title": "Mine now"}, headers=stranger_headers
    )

    assert response.status_code == 403


def test_moderator_cannot_update_others_event(auth_client, people):
    test_client, db_session_maker = auth_client
    owner, _ = people["owner"]
    _, mod_headers = people["moderator"]
    event_id = _add_event(db_session_maker, owner.id)

    response = test_client.patch(f"/api/events/{event_id}", json={"title": "X"}, headers=mod_headers)

    assert response.status_code == 403


def test_admin_can_update_any_event(auth_client, people):
    test_client, db_session_maker = auth_client
    owner, _ = people["owner"]
    _, admin_headers = people["admin"]
    event_id = _add_event(db_session_maker, owner.id)
    orphan_id = _add_event(db_session_maker, None)

    for target in (event_id, orphan_id):
        response = test_client.patch(
            f"/api/events/{target}", json={"title": "Moderated"}, headers=admin_headers
        )
        assert response.status_code == 200


def test_orphan_event_is_admin_only(auth_client, people):
    test_client, db_session_maker = auth_client
    _, headers = people["owner"]
    orphan_id = _add_event(db_session_maker, None)

    response = test_client.delete(f"/api/events/{orphan_id}", headers=headers)

    assert response.status_code == 403


def test_update_missing_event(auth_client, people):
    test_client, _ = auth_client
    _, headers = people["owner"]

    response = test_client.patch("/api/events/does-not-exist", json={"title": "X"}, headers=headers)

    assert response.status_code == 404


def test_owner_can_delete(auth_client, people):
    test_client, db_session_maker = auth_client
    owner, headers = people["owner"]
    event_id = _add_event(db_session_maker, owner.id)

    response = test_client.delete(f"/api/events/{event_id}", headers=headers)

    assert response.status_code == 204
    db = db_session_maker()
    assert db.get(Event, event_id) is None
    db.close()


def test_publish_is_staff_only(auth_client, people):
    test_client, db_session_maker = auth_client
    owner, owner_headers = people["owner"]
    _, mod_headers = people["moderator"]
    event_id = _add_event(db_session_maker, owner.id)

    denied = test_client.patch(
        f"/api/events/{event_id}/publish", json={"is_published": True}, headers=owner_headers
    )
    allowed = test_client.patch(
        f"/api/events/{event_id}/publish", json={"is_published": True}, headers=mod_headers
    )

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert allowed.json()["is_published"] is True


def test_list_events_visibility(auth_client, people):
    test_client, db_session_maker = auth_client
    owner, owner_headers = people["owner"]
    _, stranger_headers = people["stranger"]
    _, mod_headers = people["moderator"]
    _, admin_headers = people["admin"]
    _add_event(db_session_maker, owner.id, title="Public", published=True)
    _add_event(db_session_maker, owner.id, title="Draft")

    anonymous = test_client.get("/api/events").json()
    as_owner = test_client.get("/api/events", headers=owner_headers).json()
    as_admin = test_client.get("/api/events", headers=admin_headers).json()
    as_stranger = test_client.get("/api/events", headers=stranger_headers).json()
    as_moderator = test_client.get("/api/events", headers=mod_headers).json()

    assert [e["title"] for e in anonymous["items"]] == ["Public"]
    assert anonymous["total"] == 1
    assert sorted(e["title"] for e in as_owner["items"]) == ["Draft", "Public"]
    assert as_admin["total"] == 2
    assert as_stranger["total"] == 1
    assert as_moderator["total"] == 2


def test_list_events_with_bad_token_is_anonymous(auth_client, people):
    test_client, db_session_maker = auth_client
    owner, _ = people["owner"]
    _add_event(db_session_maker, owner.id, title="Public", published=True)
    _add_event(db_session_maker, owner.id, title="Draft")

    response = test_client.get("/api/events", headers=bearer("garbage"))

    assert response.status_code == 200
    assert response.json()["total"] == 1


def test_draft_hidden_from_strangers(auth_client, people):
    test_client, db_session_maker = auth_client
    owner, owner_headers = people["owner"]
    _, stranger_headers = people["stranger"]
    draft_id = _add_event(db_session_maker, owner.id)

    assert test_client.get(f"/api/events/{draft_id}").status_code == 404
    assert test_client.get(f"/api/events/{draft_id}", headers=stranger_headers).status_code == 404
    assert test_client.get(f"/api/events/{draft_id}", headers=owner_headers).status_code == 200
