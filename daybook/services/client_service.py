"""Client list management."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from daybook.core.auth import RequestUserContext
from daybook.core.logging import get_logger
from daybook.models.entities import Client
from daybook.repositories.ledger_repository import LedgerRepository
from daybook.services.rates import RateValidationError, net_daily_rate, parse_gross_rate, q2

logger = get_logger(__name__)


@dataclass(slots=True)
class ClientCreateData:
    name: str
    gross_daily_rate: object


@dataclass(slots=True)
class ClientUpdateData:
    name: str | None = None
    gross_daily_rate: object | None = None


@dataclass(slots=True)
class ClientDeleteResult:
    client_id: UUID
    orphaned_work_days: int


def _validated_name(value: str) -> str:
    name = value.strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Client name is required.",
        )
    return name


def _validated_rate(value: object) -> Decimal:
    try:
        return parse_gross_rate(value)
    except RateValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc


class ClientService:
    """Create, edit and delete the account's clients."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = LedgerRepository(db)

    @staticmethod
    def serialize_client(client: Client) -> dict[str, object]:
        return {
            "id": str(client.id),
            "name": client.name,
            "gross_daily_rate": str(q2(client.gross_daily_rate)),
            "net_daily_rate": str(q2(net_daily_rate(client.gross_daily_rate))),
            "created_at": client.created_at.isoformat(),
            "updated_at": client.updated_at.isoformat(),
        }

    def _get_owned_client(self, *, context: RequestUserContext, client_id: UUID) -> Client:
        client = self.repo.get_client(context.user_id, client_id)
        if client is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found.")
        return client

    def _commit(self, event: str, **fields: object) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("client_write_failed", operation=event, error=str(exc.orig))
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Client change violated storage constraints.",
            ) from exc
        logger.info(event, **fields)

    def list_clients(self, *, context: RequestUserContext) -> list[Client]:
        return self.repo.list_clients(context.user_id)

    def get_client(self, *, context: RequestUserContext, client_id: UUID) -> Client:
        return self._get_owned_client(context=context, client_id=client_id)

    def create_client(self, *, context: RequestUserContext, data: ClientCreateData) -> Client:
        name = _validated_name(data.name)
        gross = _validated_rate(data.gross_daily_rate)

        now = datetime.utcnow()
        client = Client(
            user_id=context.user_id,
            name=name,
            gross_daily_rate=gross,
            created_at=now,
            updated_at=now,
        )
        self.repo.add_client(client)
        self._commit("client_created", client_id=str(client.id), user_id=str(context.user_id))
        self.db.refresh(client)
        return client

    def update_client(
        self,
        *,
        context: RequestUserContext,
        client_id: UUID,
        data: ClientUpdateData,
    ) -> Client:
        name = _validated_name(data.name) if data.name is not None else None
        gross = _validated_rate(data.gross_daily_rate) if data.gross_daily_rate is not None else None

        client = self._get_owned_client(context=context, client_id=client_id)
        if name is not None:
            client.name = name
        if gross is not None:
            client.gross_daily_rate = gross
        client.updated_at = datetime.utcnow()
        self.db.flush()

        self._commit("client_updated", client_id=str(client.id), user_id=str(context.user_id))
        self.db.refresh(client)
        return client

    def delete_client(
        self,
        *,
        context: RequestUserContext,
        client_id: UUID,
        confirm: bool,
    ) -> ClientDeleteResult:
        """Delete a client without touching its historical work days."""

        if not confirm:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Client deletion is irreversible and requires confirm=true.",
            )

        client = self._get_owned_client(context=context, client_id=client_id)
        orphaned = self.repo.count_work_days_for_client(context.user_id, client.id)
        self.repo.delete_client(client)
        self._commit(
            "client_deleted",
            client_id=str(client_id),
            user_id=str(context.user_id),
            orphaned_work_days=orphaned,
        )
        return ClientDeleteResult(client_id=client_id, orphaned_work_days=orphaned)
