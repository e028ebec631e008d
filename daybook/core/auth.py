"""Authentication context extraction for account-scoped requests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from daybook.core.config import get_settings
from daybook.core.logging import get_logger
from daybook.db.dependencies import get_db_session
from daybook.models.entities import User
from daybook.repositories.ledger_repository import LedgerRepository
from daybook.services.auth_gateway import HostedAuthClient, HostedAuthError

logger = get_logger(__name__)


@dataclass(frozen=True)
class RequestUserContext:
    """Authenticated request actor resolved from credentials and DB state."""

    user_id: UUID
    auth_uid: str
    email: str
    display_name: str
    status: str


def get_auth_gateway(request: Request) -> HostedAuthClient:
    """Hosted auth client opened by the application lifespan."""

    gateway = getattr(request.app.state, "auth_gateway", None)
    if gateway is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service is not configured.",
        )
    return gateway


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header must use the Bearer scheme.",
        )
    return token.strip()


def _require_identity_headers(
    x_auth_uid: str | None,
    x_auth_email: str | None,
    x_auth_display_name: str | None,
) -> tuple[str, str, str]:
    if not x_auth_uid or not x_auth_email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=(
                "Missing credentials. Expected a Bearer token, X-Auth-UID and X-Auth-Email headers, "
                "or enable development principal fallback."
            ),
        )

    display_name = x_auth_display_name or x_auth_email
    return x_auth_uid.strip(), x_auth_email.strip().lower(), display_name.strip()


def _resolve_token_identity(token: str, gateway: HostedAuthClient) -> tuple[str, str, str]:
    try:
        user = gateway.get_user(token)
    except HostedAuthError as exc:
        if exc.is_client_error:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    email = user.email.strip().lower()
    return user.id, email, (user.display_name or email).strip()


def _resolve_identity(
    x_auth_uid: str | None,
    x_auth_email: str | None,
    x_auth_display_name: str | None,
) -> tuple[str, str, str]:
    settings = get_settings()
    if x_auth_uid and x_auth_email:
        return _require_identity_headers(x_auth_uid, x_auth_email, x_auth_display_name)

    if settings.auth_allow_dev_principal:
        return (
            settings.auth_dev_uid.strip(),
            settings.auth_dev_email.strip().lower(),
            settings.auth_dev_display_name.strip(),
        )

    return _require_identity_headers(x_auth_uid, x_auth_email, x_auth_display_name)


def _identity_conflict(db: Session, exc: IntegrityError, auth_uid: str) -> HTTPException:
    db.rollback()
    logger.warning("user_upsert_failed", auth_uid=auth_uid, error=str(exc.orig))
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="Account email is already linked to another identity.",
    )


def _upsert_user(db: Session, *, auth_uid: str, email: str, display_name: str) -> User:
    repo = LedgerRepository(db)
    user = repo.get_user_by_auth_uid(auth_uid)
    now = datetime.utcnow()

    if user is None:
        user = User(
            auth_uid=auth_uid,
            email=email,
            display_name=display_name,
            status="active",
            last_login_at=now,
            created_at=now,
            updated_at=now,
        )
        try:
            repo.add_user(user)
        except IntegrityError as exc:
            raise _identity_conflict(db, exc, auth_uid) from exc
        logger.info("user_registered", auth_uid=auth_uid)
        return user

    changed = False
    if user.email != email:
        user.email = email
        changed = True
    if user.display_name != display_name:
        user.display_name = display_name
        changed = True

    user.last_login_at = now
    if changed:
        user.updated_at = now
    try:
        db.flush()
    except IntegrityError as exc:
        raise _identity_conflict(db, exc, auth_uid) from exc
    return user


def ensure_user_principal(
    db: Session,
    *,
    auth_uid: str,
    email: str,
    display_name: str,
) -> User:
    """Ensure user exists and return persisted row.

    Utility exported for tests and seed helpers.
    """

    normalized_uid = auth_uid.strip()
    normalized_email = email.strip().lower()
    normalized_display_name = display_name.strip() or normalized_email

    user = _upsert_user(
        db,
        auth_uid=normalized_uid,
        email=normalized_email,
        display_name=normalized_display_name,
    )
    db.commit()
    db.refresh(user)
    return user


def get_current_user_context(
    request: Request,
    authorization: str | None = Header(default=None),
    x_auth_uid: str | None = Header(default=None, alias="X-Auth-UID"),
    x_auth_email: str | None = Header(default=None, alias="X-Auth-Email"),
    x_auth_display_name: str | None = Header(default=None, alias="X-Auth-Display-Name"),
    db: Session = Depends(get_db_session),
) -> RequestUserContext:
    """Resolve the current account.

    Resolution order:
    - ``Authorization: Bearer`` token validated against the hosted auth service.
    - Trusted identity headers set by the fronting proxy.
    - Development principal, when enabled.
    """

    token = _bearer_token(authorization)
    if token is not None:
        auth_uid, email, display_name = _resolve_token_identity(token, get_auth_gateway(request))
    else:
        auth_uid, email, display_name = _resolve_identity(x_auth_uid, x_auth_email, x_auth_display_name)

    user = _upsert_user(db, auth_uid=auth_uid, email=email, display_name=display_name)
    db.commit()

    return RequestUserContext(
        user_id=user.id,
        auth_uid=user.auth_uid,
        email=user.email,
        display_name=user.display_name,
        status=user.status,
    )
