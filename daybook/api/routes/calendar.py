"""Day-scheduling endpoints: month grid and client assignment per date."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from daybook.core.auth import RequestUserContext, get_current_user_context
from daybook.db.dependencies import get_db_session
from daybook.services.assignment_service import WorkDayAssignmentService
from daybook.services.calendar_grid import serialize_grid

router = APIRouter(prefix="/calendar", tags=["calendar"])


class DaySelectionPayload(BaseModel):
    selection: str = Field(default="", max_length=64)


def _assignment_service(db: Session) -> WorkDayAssignmentService:
    return WorkDayAssignmentService(db)


def _fresh_month(service: WorkDayAssignmentService, context: RequestUserContext, day: date) -> dict[str, object]:
    # Always a full re-read of the month after a mutation.
    grid = service.month_grid(context=context, year=day.year, month=day.month)
    return serialize_grid(grid)


@router.get("/{year}/{month}")
def get_month(
    year: int,
    month: int,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _assignment_service(db)
    return serialize_grid(service.month_grid(context=context, year=year, month=month))


@router.put("/days/{day}")
def select_client_for_day(
    day: date,
    payload: DaySelectionPayload,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _assignment_service(db)
    service.apply_selection(context=context, day=day, selection=payload.selection)
    return _fresh_month(service, context, day)


@router.delete("/days/{day}")
def clear_day(
    day: date,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _assignment_service(db)
    service.unassign(context=context, day=day)
    return _fresh_month(service, context, day)
