from __future__ import annotations

from collections.abc import Generator

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from daybook.core.auth import get_auth_gateway
from daybook.services.auth_gateway import HostedAuthClient

USER_PAYLOAD = {
    "id": "auth-uid-1",
    "email": "Freelancer@Test.local",
    "email_confirmed_at": "2024-03-01T10:00:00Z",
    "user_metadata": {"full_name": "Free Lancer"},
}


def _auth_service(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/auth/v1/token":
        body = request.read()
        if b"wrong-pass" in body:
            return httpx.Response(400, json={"error_description": "Invalid login credentials"})
        return httpx.Response(200, json={"access_token": "jwt", "refresh_token": "refresh", "expires_in": 3600, "user": USER_PAYLOAD})
    if path == "/auth/v1/signup":
        return httpx.Response(200, json={**USER_PAYLOAD, "email_confirmed_at": None})
    if path == "/auth/v1/recover":
        return httpx.Response(200, json={})
    if path == "/auth/v1/logout":
        return httpx.Response(204)
    if path == "/auth/v1/user":
        if request.headers.get("authorization") != "Bearer jwt":
            return httpx.Response(401, json={"msg": "invalid JWT"})
        return httpx.Response(200, json=USER_PAYLOAD)
    return httpx.Response(404)


@pytest.fixture()
def gateway() -> Generator[HostedAuthClient, None, None]:
    gateway = HostedAuthClient("https://auth.test", "anon-key", transport=httpx.MockTransport(_auth_service))
    yield gateway
    gateway.close()


@pytest.fixture()
def auth_client(app: FastAPI, gateway: HostedAuthClient) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_auth_gateway] = lambda: gateway
    with TestClient(app) as test_client:
        # Bearer resolution on account routes reads the gateway from app state.
        opened = app.state.auth_gateway
        app.state.auth_gateway = gateway
        yield test_client
        app.state.auth_gateway = opened


def test_sign_up(auth_client: TestClient) -> None:
    response = auth_client.post("/api/v1/auth/sign-up", json={"email": "freelancer@test.local", "password": "secret-pass"})

    assert response.status_code == 201
    assert response.json()["user"]["email_confirmed"] is False
    assert "Check your email" in response.json()["message"]


def test_sign_in_returns_tokens(auth_client: TestClient) -> None:
    response = auth_client.post("/api/v1/auth/sign-in", json={"email": "freelancer@test.local", "password": "secret-pass"})

    assert response.status_code == 200
    body = response.json()
    assert body["access_token"] == "jwt"
    assert body["user"]["display_name"] == "Free Lancer"


def test_sign_in_with_wrong_password_is_unauthorized(auth_client: TestClient) -> None:
    response = auth_client.post("/api/v1/auth/sign-in", json={"email": "freelancer@test.local", "password": "wrong-pass"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid login credentials"


def test_sign_in_with_blank_email_is_rejected_locally(auth_client: TestClient) -> None:
    response = auth_client.post("/api/v1/auth/sign-in", json={"email": " ", "password": "secret-pass"})

    assert response.status_code == 422
    assert response.json()["detail"] == "Email is required."


def test_password_reset(auth_client: TestClient) -> None:
    response = auth_client.post("/api/v1/auth/password-reset", json={"email": "freelancer@test.local"})

    assert response.status_code == 202


def test_password_update_requires_token_and_matching_passwords(auth_client: TestClient) -> None:
    payload = {"password": "new-secret", "confirm_password": "new-secret"}
    assert auth_client.put("/api/v1/auth/password", json=payload).status_code == 401

    mismatch = auth_client.put(
        "/api/v1/auth/password",
        headers={"Authorization": "Bearer jwt"},
        json={"password": "new-secret", "confirm_password": "other"},
    )
    assert mismatch.status_code == 422
    assert mismatch.json()["detail"] == "Passwords do not match."

    response = auth_client.put("/api/v1/auth/password", headers={"Authorization": "Bearer jwt"}, json=payload)
    assert response.status_code == 200


def test_session_and_sign_out(auth_client: TestClient) -> None:
    session = auth_client.get("/api/v1/auth/session", headers={"Authorization": "Bearer jwt"})
    assert session.status_code == 200
    assert session.json()["user"]["id"] == "auth-uid-1"

    expired = auth_client.get("/api/v1/auth/session", headers={"Authorization": "Bearer stale"})
    assert expired.status_code == 401

    response = auth_client.post("/api/v1/auth/sign-out", headers={"Authorization": "Bearer jwt"})
    assert response.status_code == 204


def test_landing_classification(auth_client: TestClient) -> None:
    response = auth_client.post(
        "/api/v1/auth/landing",
        json={"url": "https://app.test/?x=1#access_token=abc&type=recovery"},
    )

    assert response.status_code == 200
    assert response.json() == {"state": "password_recovery", "clean_url": "https://app.test/"}


def test_bearer_token_resolves_account(auth_client: TestClient) -> None:
    response = auth_client.get("/api/v1/me", headers={"Authorization": "Bearer jwt"})

    assert response.status_code == 200
    body = response.json()
    assert body["auth_uid"] == "auth-uid-1"
    assert body["email"] == "freelancer@test.local"
    assert body["display_name"] == "Free Lancer"


def test_invalid_bearer_token_is_unauthorized(auth_client: TestClient) -> None:
    response = auth_client.get("/api/v1/clients", headers={"Authorization": "Bearer stale"})

    assert response.status_code == 401


def test_non_bearer_authorization_is_rejected(auth_client: TestClient) -> None:
    response = auth_client.get("/api/v1/me", headers={"Authorization": "Basic abc"})

    assert response.status_code == 401
