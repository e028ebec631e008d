"""Light/dark theme preference."""

from __future__ import annotations

import enum
from datetime import datetime

DAYLIGHT_START_HOUR = 6
DAYLIGHT_END_HOUR = 18


class Theme(str, enum.Enum):
    LIGHT = "light"
    DARK = "dark"


THEME_VALUES = frozenset(member.value for member in Theme)


def default_theme(now: datetime) -> Theme:
    """Light between 06:00 and 18:00 local time, dark otherwise."""

    if DAYLIGHT_START_HOUR <= now.hour < DAYLIGHT_END_HOUR:
        return Theme.LIGHT
    return Theme.DARK


def resolve_theme(stored: str | None, now: datetime) -> tuple[Theme, bool]:
    """Return the effective theme and whether it came from a stored value."""

    value = (stored or "").strip().lower()
    if value in THEME_VALUES:
        return Theme(value), True
    return default_theme(now), False


def toggle_theme(theme: Theme) -> Theme:
    return Theme.DARK if theme is Theme.LIGHT else Theme.LIGHT
