"""Client-side persisted preferences (theme cookie)."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel

from daybook.core.config import Settings, get_settings
from daybook.services.theme import Theme, resolve_theme, toggle_theme

router = APIRouter(prefix="/preferences", tags=["preferences"])

THEME_COOKIE_MAX_AGE = 60 * 60 * 24 * 365


class ThemePayload(BaseModel):
    theme: Theme


def get_local_now() -> datetime:
    """Local wall-clock time used for the time-of-day theme default."""

    return datetime.now()


def _stored_theme(request: Request, settings: Settings) -> str | None:
    return request.cookies.get(settings.theme_cookie_name)


def _write_theme(response: Response, settings: Settings, theme: Theme) -> dict[str, object]:
    response.set_cookie(
        key=settings.theme_cookie_name,
        value=theme.value,
        max_age=THEME_COOKIE_MAX_AGE,
        httponly=False,
        samesite="lax",
    )
    return {"theme": theme.value, "stored": True}


@router.get("/theme")
def get_theme(
    request: Request,
    settings: Settings = Depends(get_settings),
    now: datetime = Depends(get_local_now),
) -> dict[str, object]:
    effective, stored = resolve_theme(_stored_theme(request, settings), now)
    return {"theme": effective.value, "stored": stored}


@router.put("/theme")
def put_theme(
    payload: ThemePayload,
    response: Response,
    settings: Settings = Depends(get_settings),
) -> dict[str, object]:
    return _write_theme(response, settings, payload.theme)


@router.post("/theme/toggle")
def post_theme_toggle(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
    now: datetime = Depends(get_local_now),
) -> dict[str, object]:
    current, _ = resolve_theme(_stored_theme(request, settings), now)
    return _write_theme(response, settings, toggle_theme(current))
