"""Monthly revenue endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from daybook.core.auth import RequestUserContext, get_current_user_context
from daybook.db.dependencies import get_db_session
from daybook.services.revenue_service import RevenueService

router = APIRouter(prefix="/revenue", tags=["revenue"])


@router.get("/{year}/{month}")
def get_monthly_revenue(
    year: int,
    month: int,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return RevenueService(db).monthly_report(context=context, year=year, month=month)
