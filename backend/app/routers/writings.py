"""Writing router: CRUD plus content resolution for writings."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from pydantic.alias_generators import to_camel
from sqlmodel import col, select

from app.config import get_settings
from app.dependencies import get_content_service, get_store
from app.errors import PersistenceError, ValidationError
from app.models.writing import (
    REQUIRED_WRITING_FIELDS,
    Writing,
    WritingContent,
    WritingCreate,
    WritingRead,
    WritingSaved,
    WritingUpdate,
)
from app.services.content import ContentService, encode_inline
from app.services.store import Store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/writings", tags=["writings"])


def _missing_fields(body: WritingCreate) -> list[str]:
    missing = []
    for field in REQUIRED_WRITING_FIELDS:
        value = getattr(body, field)
        if not isinstance(value, str) or not value.strip():
            missing.append(to_camel(field))
    return missing


@router.get("", response_model=list[WritingRead])
async def list_writings(
    category: str | None = Query(None, description="Only writings in this category"),
    store: Store = Depends(get_store),
) -> list[WritingRead]:
    statement = select(Writing).order_by(col(Writing.created_at).desc())
    if category:
        statement = statement.where(Writing.category == category.strip())
    return [WritingRead.model_validate(w) for w in store.find_all(statement)]


@router.post("", response_model=WritingSaved, status_code=201)
async def create_writing(
    body: WritingCreate,
    store: Store = Depends(get_store),
) -> WritingSaved:
    settings = get_settings()

    if not (body.content_url or "").strip() and body.content:
        body.content_url = encode_inline(body.content)

    missing = _missing_fields(body)
    if missing:
        raise ValidationError(
            "Missing required fields",
            None if settings.is_production else {"missing": missing},
        )

    writing = Writing(
        title=body.title.strip(),  # type: ignore[union-attr]
        category=body.category.strip(),  # type: ignore[union-attr]
        description=body.description.strip(),  # type: ignore[union-attr]
        image=body.image.strip(),  # type: ignore[union-attr]
        tags=list(body.tags or []),
        content_url=body.content_url.strip(),  # type: ignore[union-attr]
    )
    try:
        with store.transaction():
            store.add(writing)
    except PersistenceError as exc:
        if settings.is_production or exc.__cause__ is None:
            raise
        raise PersistenceError(
            "Failed to create writing", {"cause": repr(exc.__cause__)}
        ) from exc
    store.refresh(writing)
    logger.info("Created writing %s (%s)", writing.id, writing.category)
    return WritingSaved(
        message="Writing created successfully",
        writing=WritingRead.model_validate(writing),
    )


@router.get("/{writing_id}", response_model=WritingRead)
async def get_writing(writing_id: str, store: Store = Depends(get_store)) -> WritingRead:
    return WritingRead.model_validate(store.require(Writing, writing_id, "Writing"))


@router.put("/{writing_id}", response_model=WritingSaved)
async def update_writing(
    writing_id: str,
    body: WritingUpdate,
    store: Store = Depends(get_store),
) -> WritingSaved:
    writing = store.require(Writing, writing_id, "Writing")
    # Explicit nulls keep the stored value
    update_data = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}

    with store.transaction():
        store.update(writing, update_data)
    store.refresh(writing)
    return WritingSaved(
        message="Writing updated successfully",
        writing=WritingRead.model_validate(writing),
    )


@router.delete("/{writing_id}")
async def delete_writing(writing_id: str, store: Store = Depends(get_store)) -> dict:
    writing = store.require(Writing, writing_id, "Writing")
    with store.transaction():
        store.delete(writing)
    logger.info("Deleted writing %s", writing_id)
    return {"message": "Writing deleted successfully"}


@router.get("/{writing_id}/content", response_model=WritingContent)
async def get_writing_content(
    writing_id: str,
    store: Store = Depends(get_store),
    content_service: ContentService = Depends(get_content_service),
) -> WritingContent:
    """Full text of a writing, decoded inline or fetched from its URL."""
    writing = store.require(Writing, writing_id, "Writing")
    source, text = await content_service.resolve(writing.content_url)
    return WritingContent(id=writing.id, source=source, content=text)
