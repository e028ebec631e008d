"""Client list endpoints."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from daybook.core.auth import RequestUserContext, get_current_user_context
from daybook.db.dependencies import get_db_session
from daybook.services.client_service import ClientCreateData, ClientService, ClientUpdateData

router = APIRouter(prefix="/clients", tags=["clients"])


class ClientCreatePayload(BaseModel):
    name: str = Field(max_length=255)
    # Accepted as text too; parsing happens in the rate model so blanks are rejected, not zeroed.
    gross_daily_rate: Decimal | str


class ClientUpdatePayload(BaseModel):
    name: str | None = Field(default=None, max_length=255)
    gross_daily_rate: Decimal | str | None = None


def _client_service(db: Session) -> ClientService:
    return ClientService(db)


@router.get("")
def list_clients(
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    service = _client_service(db)
    items = service.list_clients(context=context)
    return {"items": [service.serialize_client(client) for client in items]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_client(
    payload: ClientCreatePayload,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _client_service(db)
    client = service.create_client(
        context=context,
        data=ClientCreateData(name=payload.name, gross_daily_rate=payload.gross_daily_rate),
    )
    return service.serialize_client(client)


@router.get("/{client_id}")
def get_client(
    client_id: UUID,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _client_service(db)
    return service.serialize_client(service.get_client(context=context, client_id=client_id))


@router.put("/{client_id}")
def update_client(
    client_id: UUID,
    payload: ClientUpdatePayload,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _client_service(db)
    client = service.update_client(
        context=context,
        client_id=client_id,
        data=ClientUpdateData(name=payload.name, gross_daily_rate=payload.gross_daily_rate),
    )
    return service.serialize_client(client)


@router.delete("/{client_id}")
def delete_client(
    client_id: UUID,
    confirm: bool = Query(default=False),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _client_service(db)
    result = service.delete_client(context=context, client_id=client_id, confirm=confirm)
    return {
        "deleted": True,
        "id": str(result.client_id),
        "orphaned_work_days": result.orphaned_work_days,
    }
