"""Monthly revenue screen and exports."""

from __future__ import annotations

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from daybook.core.auth import RequestUserContext
from daybook.core.config import get_settings
from daybook.core.logging import get_logger
from daybook.services.assignment_service import WorkDayAssignmentService
from daybook.services.report_renderer import (
    EXPORT_FORMATS,
    EmptyReportError,
    ExportFilePayload,
    build_revenue_view,
    render_export,
)
from daybook.services.revenue_aggregator import MonthlyBreakdown, aggregate_month

logger = get_logger(__name__)


class RevenueService:
    """Aggregates a month of work days on every call; nothing is cached."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.settings = get_settings()
        self.work_days = WorkDayAssignmentService(db)

    def monthly_breakdown(self, *, context: RequestUserContext, year: int, month: int) -> MonthlyBreakdown:
        records = self.work_days.load_month(context=context, year=year, month=month)
        return aggregate_month(records)

    def monthly_report(self, *, context: RequestUserContext, year: int, month: int) -> dict[str, object]:
        breakdown = self.monthly_breakdown(context=context, year=year, month=month)
        return build_revenue_view(
            breakdown,
            year=year,
            month=month,
            currency_code=self.settings.currency_code,
        )

    def export_report(
        self,
        *,
        context: RequestUserContext,
        year: int,
        month: int,
        format_name: str,
    ) -> ExportFilePayload:
        normalized_format = format_name.strip().lower()
        if normalized_format not in EXPORT_FORMATS:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"format must be one of: {', '.join(sorted(EXPORT_FORMATS))}.",
            )

        breakdown = self.monthly_breakdown(context=context, year=year, month=month)
        try:
            exported = render_export(
                breakdown,
                format_name=normalized_format,
                year=year,
                month=month,
                currency_code=self.settings.currency_code,
                font_path=self.settings.report_font_path,
            )
        except EmptyReportError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

        logger.info(
            "revenue_exported",
            user_id=str(context.user_id),
            month=f"{year:04d}-{month:02d}",
            format=normalized_format,
            size=len(exported.content),
        )
        return exported
