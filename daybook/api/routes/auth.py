"""Account endpoints backed by the hosted auth service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel, Field

from daybook.core.auth import get_auth_gateway
from daybook.services.auth_gateway import (
    AuthSession,
    AuthUser,
    AuthValidationError,
    HostedAuthClient,
    HostedAuthError,
    classify_landing_url,
)

router = APIRouter(prefix="/auth", tags=["auth"])


class CredentialsPayload(BaseModel):
    email: str = Field(max_length=320)
    password: str = Field(max_length=256)


class PasswordResetPayload(BaseModel):
    email: str = Field(max_length=320)


class PasswordUpdatePayload(BaseModel):
    password: str = Field(max_length=256)
    confirm_password: str = Field(max_length=256)


class LandingPayload(BaseModel):
    url: str = Field(min_length=1, max_length=4096)


def _serialize_user(user: AuthUser) -> dict[str, object]:
    return {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
        "email_confirmed": user.email_confirmed,
    }


def _serialize_session(session: AuthSession) -> dict[str, object]:
    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_in": session.expires_in,
        "user": _serialize_user(session.user),
    }


def _require_token(authorization: str | None) -> str:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Bearer token.",
        )
    return token.strip()


def _as_http_error(exc: AuthValidationError | HostedAuthError) -> HTTPException:
    if isinstance(exc, AuthValidationError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    if exc.is_client_error:
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.post("/sign-up", status_code=status.HTTP_201_CREATED)
def sign_up(
    payload: CredentialsPayload,
    gateway: HostedAuthClient = Depends(get_auth_gateway),
) -> dict[str, object]:
    try:
        user = gateway.sign_up(payload.email, payload.password)
    except (AuthValidationError, HostedAuthError) as exc:
        raise _as_http_error(exc) from exc
    return {
        "user": _serialize_user(user),
        "message": "Registration complete. Check your email to confirm the account.",
    }


@router.post("/sign-in")
def sign_in(
    payload: CredentialsPayload,
    gateway: HostedAuthClient = Depends(get_auth_gateway),
) -> dict[str, object]:
    try:
        session = gateway.sign_in(payload.email, payload.password)
    except (AuthValidationError, HostedAuthError) as exc:
        raise _as_http_error(exc) from exc
    return _serialize_session(session)


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
def sign_out(
    authorization: str | None = Header(default=None),
    gateway: HostedAuthClient = Depends(get_auth_gateway),
) -> None:
    token = _require_token(authorization)
    try:
        gateway.sign_out(token)
    except HostedAuthError as exc:
        raise _as_http_error(exc) from exc


@router.post("/password-reset", status_code=status.HTTP_202_ACCEPTED)
def request_password_reset(
    payload: PasswordResetPayload,
    gateway: HostedAuthClient = Depends(get_auth_gateway),
) -> dict[str, str]:
    try:
        gateway.request_password_reset(payload.email)
    except (AuthValidationError, HostedAuthError) as exc:
        raise _as_http_error(exc) from exc
    return {"message": "Password recovery email sent. Check your inbox."}


@router.put("/password")
def update_password(
    payload: PasswordUpdatePayload,
    authorization: str | None = Header(default=None),
    gateway: HostedAuthClient = Depends(get_auth_gateway),
) -> dict[str, object]:
    token = _require_token(authorization)
    try:
        user = gateway.update_password(token, payload.password, payload.confirm_password)
    except (AuthValidationError, HostedAuthError) as exc:
        raise _as_http_error(exc) from exc
    return {"user": _serialize_user(user), "message": "Password updated. Sign in with the new password."}


@router.get("/session")
def get_session(
    authorization: str | None = Header(default=None),
    gateway: HostedAuthClient = Depends(get_auth_gateway),
) -> dict[str, object]:
    token = _require_token(authorization)
    try:
        user = gateway.get_user(token)
    except HostedAuthError as exc:
        raise _as_http_error(exc) from exc
    return {"user": _serialize_user(user)}


@router.post("/landing")
def classify_landing(payload: LandingPayload) -> dict[str, str]:
    """Tell the UI which post-redirect screen to show and which address to restore."""

    result = classify_landing_url(payload.url)
    return {"state": result.state.value, "clean_url": result.clean_url}
