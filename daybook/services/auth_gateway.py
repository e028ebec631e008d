"""Client for the hosted authentication service (GoTrue-compatible REST API)."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs, urlsplit, urlunsplit

import httpx

from daybook.core.config import Settings, get_settings
from daybook.core.logging import get_logger

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


class AuthValidationError(ValueError):
    """Input rejected locally; no request was sent."""


class HostedAuthError(Exception):
    """The hosted auth service rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_client_error(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500


@dataclass(slots=True, frozen=True)
class AuthUser:
    id: str
    email: str
    display_name: str | None = None
    email_confirmed: bool = False


@dataclass(slots=True, frozen=True)
class AuthSession:
    access_token: str
    refresh_token: str | None
    expires_in: int | None
    user: AuthUser


class LandingState(str, enum.Enum):
    NONE = "none"
    SIGNUP_CONFIRMATION = "signup_confirmation"
    PASSWORD_RECOVERY = "password_recovery"


@dataclass(slots=True, frozen=True)
class LandingResult:
    state: LandingState
    clean_url: str


# ---------- Local validation ----------
def validate_credentials(email: str, password: str) -> tuple[str, str]:
    normalized_email = email.strip().lower()
    if not normalized_email:
        raise AuthValidationError("Email is required.")
    if not password:
        raise AuthValidationError("Password is required.")
    return normalized_email, password


def validate_email(email: str) -> str:
    normalized_email = email.strip().lower()
    if not normalized_email:
        raise AuthValidationError("Enter your email to reset the password.")
    return normalized_email


def validate_new_password(password: str, confirmation: str) -> str:
    if password != confirmation:
        raise AuthValidationError("Passwords do not match.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise AuthValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")
    return password


def classify_landing_url(url: str) -> LandingResult:
    """Detect an auth redirect landing from the URL fragment.

    The clean URL drops fragment and query so the caller can replace the
    visible address before anything else reads the tokens.
    """

    parts = urlsplit(url)
    clean_url = urlunsplit((parts.scheme, parts.netloc, parts.path or "/", "", ""))

    fragment = parse_qs(parts.fragment)
    if "access_token" not in fragment:
        return LandingResult(state=LandingState.NONE, clean_url=clean_url)

    landing_type = fragment.get("type", [""])[0]
    if landing_type == "signup":
        return LandingResult(state=LandingState.SIGNUP_CONFIRMATION, clean_url=clean_url)
    if landing_type == "recovery":
        return LandingResult(state=LandingState.PASSWORD_RECOVERY, clean_url=clean_url)
    return LandingResult(state=LandingState.NONE, clean_url=clean_url)


# ---------- Remote client ----------
def _parse_user(payload: dict[str, Any]) -> AuthUser:
    metadata = payload.get("user_metadata") or {}
    return AuthUser(
        id=str(payload["id"]),
        email=str(payload.get("email") or ""),
        display_name=metadata.get("display_name") or metadata.get("full_name"),
        email_confirmed=bool(payload.get("email_confirmed_at") or payload.get("confirmed_at")),
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"Auth service responded with status {response.status_code}."
    if isinstance(body, dict):
        for key in ("error_description", "msg", "message", "error"):
            if body.get(key):
                return str(body[key])
    return f"Auth service responded with status {response.status_code}."


class HostedAuthClient:
    """Synchronous client for sign-up, sign-in and password flows."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.base_url = (base_url or settings.auth_service_url).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.auth_service_api_key.get_secret_value()
        self.default_redirect_url = settings.auth_redirect_url
        self._client = httpx.Client(
            base_url=f"{self.base_url}/auth/v1",
            timeout=httpx.Timeout(timeout or settings.auth_timeout_seconds),
            headers={"apikey": self._api_key},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HostedAuthClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        access_token: str | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else None
        try:
            response = self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("auth_service_unreachable", operation=operation, error=str(exc))
            raise HostedAuthError("Auth service is unreachable.") from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning(
                "auth_service_error",
                operation=operation,
                status_code=response.status_code,
                error=message,
            )
            raise HostedAuthError(message, status_code=response.status_code)
        return response

    def sign_up(self, email: str, password: str, *, redirect_to: str | None = None) -> AuthUser:
        """Register an account; the service emails a confirmation link to ``redirect_to``."""

        email, password = validate_credentials(email, password)
        response = self._request(
            "POST",
            "/signup",
            operation="sign_up",
            params={"redirect_to": redirect_to or self.default_redirect_url},
            json={"email": email, "password": password},
        )
        payload = response.json()
        # Auto-confirming deployments answer with a full session instead of a bare user.
        user_payload = payload.get("user", payload) if isinstance(payload, dict) else {}
        return _parse_user(user_payload)

    def sign_in(self, email: str, password: str) -> AuthSession:
        email, password = validate_credentials(email, password)
        response = self._request(
            "POST",
            "/token",
            operation="sign_in",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        payload = response.json()
        return AuthSession(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            expires_in=payload.get("expires_in"),
            user=_parse_user(payload["user"]),
        )

    def sign_out(self, access_token: str) -> None:
        self._request("POST", "/logout", operation="sign_out", access_token=access_token)

    def request_password_reset(self, email: str, *, redirect_to: str | None = None) -> None:
        email = validate_email(email)
        self._request(
            "POST",
            "/recover",
            operation="request_password_reset",
            params={"redirect_to": redirect_to or self.default_redirect_url},
            json={"email": email},
        )

    def update_password(self, access_token: str, password: str, confirmation: str) -> AuthUser:
        """Set a new password using the token delivered by the recovery redirect."""

        password = validate_new_password(password, confirmation)
        response = self._request(
            "PUT",
            "/user",
            operation="update_password",
            access_token=access_token,
            json={"password": password},
        )
        return _parse_user(response.json())

    def get_user(self, access_token: str) -> AuthUser:
        response = self._request("GET", "/user", operation="get_user", access_token=access_token)
        return _parse_user(response.json())
