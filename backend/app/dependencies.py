"""FastAPI dependency injection for the data access layer and services."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from app.db import get_session
from app.services.content import ContentService
from app.services.profile import ProfileService
from app.services.store import Store


def get_store(session: Session = Depends(get_session)) -> Store:
    """Wrap the request-scoped session in the typed data access layer."""
    return Store(session)


def get_profile_service(store: Store = Depends(get_store)) -> ProfileService:
    return ProfileService(store)


def get_content_service(request: Request) -> ContentService:
    """Inject the ContentService initialized at startup."""
    svc = getattr(request.app.state, "content_service", None)
    if svc is None:
        raise HTTPException(
            status_code=503,
            detail="Content service unavailable",
        )
    return svc
