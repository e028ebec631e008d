"""Repository helpers for clients and work days."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from daybook.models.entities import Client, User, WorkDay


class LedgerRepository:
    """Persistence operations scoped to a single account.

    Every read filters on ``user_id``; callers never see another account's
    rows, so a foreign id behaves exactly like a missing one.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Users ----------
    def get_user_by_auth_uid(self, auth_uid: str) -> User | None:
        return self.db.scalar(select(User).where(User.auth_uid == auth_uid))

    def add_user(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user

    # ---------- Clients ----------
    def list_clients(self, user_id: UUID) -> list[Client]:
        return self.db.scalars(
            select(Client)
            .where(Client.user_id == user_id)
            .order_by(Client.name.asc(), Client.created_at.asc())
        ).all()

    def get_client(self, user_id: UUID, client_id: UUID) -> Client | None:
        return self.db.scalar(
            select(Client).where(and_(Client.user_id == user_id, Client.id == client_id))
        )

    def add_client(self, client: Client) -> Client:
        self.db.add(client)
        self.db.flush()
        return client

    def delete_client(self, client: Client) -> None:
        self.db.delete(client)
        self.db.flush()

    # ---------- Work days ----------
    def list_work_days(
        self,
        user_id: UUID,
        *,
        from_date: date,
        to_date: date,
    ) -> list[tuple[WorkDay, Client | None]]:
        """Work days in the inclusive range with their client joined inline.

        The join is an outer join on the owner's clients: a work day whose
        client was deleted comes back paired with ``None``.
        """

        rows = self.db.execute(
            select(WorkDay, Client)
            .outerjoin(
                Client,
                and_(Client.id == WorkDay.client_id, Client.user_id == WorkDay.user_id),
            )
            .where(
                and_(
                    WorkDay.user_id == user_id,
                    WorkDay.day >= from_date,
                    WorkDay.day <= to_date,
                )
            )
            .order_by(WorkDay.day.asc(), WorkDay.created_at.asc())
        ).all()
        return [(row[0], row[1]) for row in rows]

    def get_work_day_for_date(self, user_id: UUID, day: date) -> WorkDay | None:
        return self.db.scalar(
            select(WorkDay).where(and_(WorkDay.user_id == user_id, WorkDay.day == day))
        )

    def count_work_days_for_client(self, user_id: UUID, client_id: UUID) -> int:
        total = self.db.scalar(
            select(func.count(WorkDay.id)).where(
                and_(WorkDay.user_id == user_id, WorkDay.client_id == client_id)
            )
        )
        return int(total or 0)

    def add_work_day(self, work_day: WorkDay) -> WorkDay:
        self.db.add(work_day)
        self.db.flush()
        return work_day

    def delete_work_day(self, work_day: WorkDay) -> None:
        self.db.delete(work_day)
        self.db.flush()
