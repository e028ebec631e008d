"""Month helpers and the Monday-first calendar grid."""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from fastapi import HTTPException, status

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
UNKNOWN_CLIENT_LABEL = "Unknown client"


@dataclass(slots=True, frozen=True)
class WorkDayRecord:
    """A work day with its client resolved at read time.

    ``client_name`` and ``gross_daily_rate`` are ``None`` when the referenced
    client no longer exists.
    """

    work_day_id: UUID
    day: date
    client_id: UUID
    client_name: str | None
    gross_daily_rate: Decimal | None

    @property
    def is_orphaned(self) -> bool:
        return self.client_name is None


@dataclass(slots=True, frozen=True)
class CalendarCell:
    day: int
    date: date
    is_today: bool
    work_day_id: UUID | None = None
    client_id: UUID | None = None
    client_name: str | None = None


@dataclass(slots=True)
class MonthGrid:
    year: int
    month: int
    leading_blanks: int
    weeks: list[list[CalendarCell | None]]

    @property
    def cells(self) -> list[CalendarCell]:
        return [cell for week in self.weeks for cell in week if cell is not None]


def validate_month(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="month must be between 1 and 12.",
        )
    if not 1 <= year <= 9999:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="year must be between 1 and 9999.",
        )


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of the month, both inclusive."""

    days_in_month = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, days_in_month)


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def month_label(year: int, month: int) -> str:
    return f"{MONTH_NAMES[month - 1]} {year}"


def first_weekday_index(year: int, month: int) -> int:
    """Column of day 1 in a Monday-first week (Monday=0 ... Sunday=6)."""

    # isoweekday() counts Monday=1 .. Sunday=7; shift so Sunday lands on 6.
    return date(year, month, 1).isoweekday() - 1


def build_month_grid(
    year: int,
    month: int,
    work_days: Iterable[WorkDayRecord],
    *,
    today: date,
) -> MonthGrid:
    """Lay out one month as Monday-first week rows of seven cells.

    Cells outside the month are ``None``. A cell carries the client of the
    work day whose date matches exactly; an orphaned work day is labelled
    with ``UNKNOWN_CLIENT_LABEL``.
    """

    validate_month(year, month)
    first_day, last_day = month_bounds(year, month)

    by_date: dict[date, WorkDayRecord] = {}
    for record in work_days:
        if first_day <= record.day <= last_day:
            by_date.setdefault(record.day, record)

    leading_blanks = first_weekday_index(year, month)
    slots: list[CalendarCell | None] = [None] * leading_blanks

    for day_number in range(1, last_day.day + 1):
        current = date(year, month, day_number)
        record = by_date.get(current)
        if record is None:
            slots.append(CalendarCell(day=day_number, date=current, is_today=current == today))
            continue
        slots.append(
            CalendarCell(
                day=day_number,
                date=current,
                is_today=current == today,
                work_day_id=record.work_day_id,
                client_id=record.client_id,
                client_name=record.client_name if record.client_name is not None else UNKNOWN_CLIENT_LABEL,
            )
        )

    trailing = (-len(slots)) % 7
    slots.extend([None] * trailing)

    weeks = [slots[index : index + 7] for index in range(0, len(slots), 7)]
    return MonthGrid(year=year, month=month, leading_blanks=leading_blanks, weeks=weeks)


def serialize_cell(cell: CalendarCell | None) -> dict[str, object] | None:
    if cell is None:
        return None
    return {
        "day": cell.day,
        "date": cell.date.isoformat(),
        "is_today": cell.is_today,
        "work_day_id": str(cell.work_day_id) if cell.work_day_id is not None else None,
        "client_id": str(cell.client_id) if cell.client_id is not None else None,
        "client_name": cell.client_name,
    }


def serialize_grid(grid: MonthGrid) -> dict[str, object]:
    prev_year, prev_month = shift_month(grid.year, grid.month, -1)
    next_year, next_month = shift_month(grid.year, grid.month, 1)
    return {
        "year": grid.year,
        "month": grid.month,
        "label": month_label(grid.year, grid.month),
        "weekdays": list(WEEKDAY_LABELS),
        "leading_blanks": grid.leading_blanks,
        "weeks": [[serialize_cell(cell) for cell in week] for week in grid.weeks],
        "previous": {"year": prev_year, "month": prev_month},
        "next": {"year": next_year, "month": next_month},
    }
