"""Work-day assignment: one client per calendar date."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from daybook.core.auth import RequestUserContext
from daybook.core.logging import get_logger
from daybook.models.entities import WorkDay
from daybook.repositories.ledger_repository import LedgerRepository
from daybook.services.calendar_grid import MonthGrid, WorkDayRecord, build_month_grid, month_bounds, validate_month

logger = get_logger(__name__)

NO_CLIENT_SELECTION = ""
REMOVE_SELECTION = "remove"


class WorkDayAssignmentService:
    """Assign, replace and remove the client worked for on a given date.

    Mutations commit immediately; callers re-read the whole month through
    ``month_grid`` afterwards instead of patching a cached view.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = LedgerRepository(db)

    def load_month(self, *, context: RequestUserContext, year: int, month: int) -> list[WorkDayRecord]:
        validate_month(year, month)
        first_day, last_day = month_bounds(year, month)
        return [
            WorkDayRecord(
                work_day_id=work_day.id,
                day=work_day.day,
                client_id=work_day.client_id,
                client_name=client.name if client is not None else None,
                gross_daily_rate=client.gross_daily_rate if client is not None else None,
            )
            for work_day, client in self.repo.list_work_days(
                context.user_id,
                from_date=first_day,
                to_date=last_day,
            )
        ]

    def month_grid(
        self,
        *,
        context: RequestUserContext,
        year: int,
        month: int,
        today: date | None = None,
    ) -> MonthGrid:
        records = self.load_month(context=context, year=year, month=month)
        return build_month_grid(year, month, records, today=today or date.today())

    def _conflict(self, exc: IntegrityError, operation: str) -> HTTPException:
        self.db.rollback()
        logger.warning("work_day_write_failed", operation=operation, error=str(exc.orig))
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Another change to this date is already in progress. Reload and try again.",
        )

    def _commit(self, event: str, **fields: object) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            raise self._conflict(exc, event) from exc
        logger.info(event, **fields)

    def assign(self, *, context: RequestUserContext, day: date, client_id: UUID) -> WorkDay:
        """Create the date's work day, or point the existing one at ``client_id``."""

        client = self.repo.get_client(context.user_id, client_id)
        if client is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found.")

        now = datetime.utcnow()
        work_day = self.repo.get_work_day_for_date(context.user_id, day)
        if work_day is None:
            work_day = WorkDay(
                user_id=context.user_id,
                day=day,
                client_id=client.id,
                created_at=now,
                updated_at=now,
            )
            try:
                self.repo.add_work_day(work_day)
            except IntegrityError as exc:
                raise self._conflict(exc, "work_day_assigned") from exc
        else:
            work_day.client_id = client.id
            work_day.updated_at = now
            self.db.flush()

        self._commit(
            "work_day_assigned",
            user_id=str(context.user_id),
            date=day.isoformat(),
            client_id=str(client.id),
        )
        self.db.refresh(work_day)
        return work_day

    def unassign(self, *, context: RequestUserContext, day: date) -> bool:
        """Remove the date's work day. Returns ``False`` when there was none."""

        work_day = self.repo.get_work_day_for_date(context.user_id, day)
        if work_day is None:
            return False

        self.repo.delete_work_day(work_day)
        self._commit("work_day_removed", user_id=str(context.user_id), date=day.isoformat())
        return True

    def apply_selection(self, *, context: RequestUserContext, day: date, selection: str) -> None:
        """Apply a client picker value for ``day``.

        ``""`` (no client) leaves the date untouched, ``"remove"`` unassigns
        it, anything else must be the id of one of the account's clients.
        """

        value = selection.strip()
        if value == NO_CLIENT_SELECTION:
            return
        if value == REMOVE_SELECTION:
            self.unassign(context=context, day=day)
            return

        try:
            client_id = UUID(value)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="selection must be empty, 'remove' or a client id.",
            ) from exc
        self.assign(context=context, day=day, client_id=client_id)
