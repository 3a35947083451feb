from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, text

from app.db import get_session

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["health"])

SERVICE_NAME = "folio-backend"
SERVICE_VERSION = "0.1.0"


def _ping_database(session: Session) -> str | None:
    """Return None when the database answers, else the error text."""
    try:
        session.exec(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Database ping failed: %s", exc)
        return str(exc)
    return None


@router.get("/health")
async def health(request: Request, session: Session = Depends(get_session)):
    db_error = _ping_database(session)
    db_status = "ok" if db_error is None else f"error: {db_error}"

    content_status = (
        "ok" if getattr(request.app.state, "content_service", None) is not None else "unavailable"
    )

    return {
        "status": "healthy" if db_error is None else "unhealthy",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "checks": {
            "database": db_status,
            "content": content_status,
        },
    }


@router.get("/health/ready")
async def readiness(session: Session = Depends(get_session)):
    db_error = _ping_database(session)
    if db_error is not None:
        return JSONResponse(
            status_code=503,
            content={
                "status": "not ready",
                "service": SERVICE_NAME,
                "error": db_error,
            },
        )

    return {
        "status": "ready",
        "service": SERVICE_NAME,
    }
