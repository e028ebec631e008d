"""Health check endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from daybook.core.logging import get_logger
from daybook.db.dependencies import get_db_session

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health")
def health() -> dict[str, str]:
    """Simple liveness endpoint."""

    return {"status": "ok"}


@router.get("/health/ready")
def readiness(db: Session = Depends(get_db_session)) -> dict[str, str]:
    """Readiness: the record store answers a trivial query."""

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("storage_unavailable", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage is unavailable.",
        ) from exc
    return {"status": "ready"}
