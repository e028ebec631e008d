from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from daybook.core.auth import ensure_user_principal
from daybook.core.config import get_settings
from daybook.models.entities import User


def _headers(uid: str, email: str, display_name: str) -> dict[str, str]:
    return {
        "X-Auth-UID": uid,
        "X-Auth-Email": email,
        "X-Auth-Display-Name": display_name,
    }


def test_identity_headers_register_account(client: TestClient, db_session: Session) -> None:
    response = client.get("/api/v1/me", headers=_headers("uid-1", " Person@Test.Local ", "Person"))

    assert response.status_code == 200
    body = response.json()
    assert body["auth_uid"] == "uid-1"
    assert body["email"] == "person@test.local"
    assert body["status"] == "active"

    users = db_session.scalars(select(User)).all()
    assert [user.auth_uid for user in users] == ["uid-1"]
    assert users[0].last_login_at is not None


def test_repeat_requests_update_profile_without_duplicates(client: TestClient, db_session: Session) -> None:
    client.get("/api/v1/me", headers=_headers("uid-1", "person@test.local", "Person"))
    response = client.get("/api/v1/me", headers=_headers("uid-1", "person@test.local", "Renamed Person"))

    assert response.json()["display_name"] == "Renamed Person"
    assert len(db_session.scalars(select(User)).all()) == 1


def test_display_name_defaults_to_email(client: TestClient) -> None:
    response = client.get("/api/v1/me", headers={"X-Auth-UID": "uid-2", "X-Auth-Email": "nameless@test.local"})

    assert response.json()["display_name"] == "nameless@test.local"


def test_dev_principal_used_without_credentials(client: TestClient) -> None:
    settings = get_settings()

    response = client.get("/api/v1/me")

    assert response.status_code == 200
    assert response.json()["auth_uid"] == settings.auth_dev_uid
    assert response.json()["email"] == settings.auth_dev_email.lower()


def test_missing_credentials_rejected_when_dev_principal_disabled(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(get_settings(), "auth_allow_dev_principal", False)

    response = client.get("/api/v1/me")

    assert response.status_code == 401
    assert "Missing credentials" in response.json()["detail"]


def test_ensure_user_principal_normalizes_and_reuses_row(db_session: Session) -> None:
    first = ensure_user_principal(db_session, auth_uid=" uid-3 ", email="Seed@Test.Local", display_name=" ")
    second = ensure_user_principal(db_session, auth_uid="uid-3", email="seed@test.local", display_name="Seed")

    assert first.id == second.id
    assert second.auth_uid == "uid-3"
    assert second.email == "seed@test.local"
    assert second.display_name == "Seed"


def test_new_identity_with_taken_email_is_a_conflict(client: TestClient, db_session: Session) -> None:
    first = client.get("/api/v1/me", headers=_headers("uid-old", "same@test.local", "Old"))
    assert first.status_code == 200

    response = client.get("/api/v1/me", headers=_headers("uid-new", "same@test.local", "New"))

    assert response.status_code == 409
    assert response.json()["detail"] == "Account email is already linked to another identity."
    users = db_session.scalars(select(User)).all()
    assert [user.auth_uid for user in users] == ["uid-old"]

    again = client.get("/api/v1/me", headers=_headers("uid-old", "same@test.local", "Old"))
    assert again.status_code == 200


def test_email_change_onto_taken_email_is_a_conflict(client: TestClient, db_session: Session) -> None:
    client.get("/api/v1/me", headers=_headers("uid-a", "a@test.local", "A"))
    client.get("/api/v1/me", headers=_headers("uid-b", "b@test.local", "B"))

    response = client.get("/api/v1/me", headers=_headers("uid-b", "a@test.local", "B"))

    assert response.status_code == 409
    stored = db_session.scalar(select(User).where(User.auth_uid == "uid-b"))
    assert stored.email == "b@test.local"
