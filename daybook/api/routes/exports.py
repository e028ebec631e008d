"""Export endpoint for the monthly revenue report."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from daybook.core.auth import RequestUserContext, get_current_user_context
from daybook.db.dependencies import get_db_session
from daybook.services.revenue_service import RevenueService

router = APIRouter(prefix="/exports", tags=["exports"])


@router.get("/revenue/{year}/{month}")
def export_monthly_revenue(
    year: int,
    month: int,
    format: str = Query(default="pdf"),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> Response:
    exported = RevenueService(db).export_report(
        context=context,
        year=year,
        month=month,
        format_name=format,
    )
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )
