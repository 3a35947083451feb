"""Photo router: gallery CRUD."""

from __future__ import annotations

import logging
import secrets
import string
import time
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import ValidationError as PydanticValidationError
from sqlmodel import col, select

from app.dependencies import get_store
from app.errors import ValidationError
from app.models.photo import Photo, PhotoCreate, PhotoRead, PhotoUpdate
from app.services.store import Store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/photos", tags=["photos"])

_BASE36 = string.digits + string.ascii_lowercase


def generate_filename() -> str:
    """e.g. ``photo-1718000000000-k3j9x0a.jpg``"""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(7))
    return f"photo-{int(time.time() * 1000)}-{suffix}.jpg"


def _parse_photos(body: dict[str, Any]) -> list[PhotoCreate]:
    """Accept a single photo object or ``{"photos": [...]}``."""
    raw_items = body["photos"] if isinstance(body.get("photos"), list) else [body]
    items: list[PhotoCreate] = []
    for raw in raw_items:
        try:
            item = PhotoCreate.model_validate(raw)
        except PydanticValidationError as exc:
            raise ValidationError("Invalid photo payload") from exc
        if not (item.url or "").strip():
            raise ValidationError("URL is required for each photo")
        items.append(item)
    return items


@router.get("", response_model=list[PhotoRead])
async def list_photos(store: Store = Depends(get_store)) -> list[PhotoRead]:
    photos = store.find_all(select(Photo).order_by(col(Photo.created_at).desc()))
    return [PhotoRead.model_validate(p) for p in photos]


@router.post("", response_model=list[PhotoRead], status_code=201)
async def create_photos(
    body: dict[str, Any] = Body(...),
    store: Store = Depends(get_store),
) -> list[PhotoRead]:
    items = _parse_photos(body)

    photos: list[Photo] = []
    with store.transaction():
        for item in items:
            filename = item.filename or generate_filename()
            photos.append(
                Photo(
                    url=item.url.strip(),  # type: ignore[union-attr]
                    title=item.title or None,
                    filename=filename,
                    path=item.path or f"/uploads/photos/{filename}",
                )
            )
        store.add_all(photos)
    for photo in photos:
        store.refresh(photo)
    logger.info("Created %d photo(s)", len(photos))
    return [PhotoRead.model_validate(p) for p in photos]


@router.delete("")
async def delete_photo_by_query(
    id: str | None = Query(None),
    store: Store = Depends(get_store),
) -> dict:
    if not id:
        raise ValidationError("ID is required to delete a photo")
    return _delete_photo(id, store)


@router.get("/{photo_id}", response_model=PhotoRead)
async def get_photo(photo_id: str, store: Store = Depends(get_store)) -> PhotoRead:
    return PhotoRead.model_validate(store.require(Photo, photo_id, "Photo"))


@router.put("/{photo_id}", response_model=PhotoRead)
async def update_photo(
    photo_id: str,
    body: PhotoUpdate,
    store: Store = Depends(get_store),
) -> PhotoRead:
    photo = store.require(Photo, photo_id, "Photo")
    update_data = body.model_dump(exclude_unset=True)
    if "url" in update_data and not (update_data["url"] or "").strip():
        raise ValidationError("URL cannot be empty")
    for key in ("filename", "path"):
        if key in update_data and not update_data[key]:
            del update_data[key]

    with store.transaction():
        store.update(photo, update_data)
    store.refresh(photo)
    return PhotoRead.model_validate(photo)


@router.delete("/{photo_id}")
async def delete_photo(photo_id: str, store: Store = Depends(get_store)) -> dict:
    return _delete_photo(photo_id, store)


def _delete_photo(photo_id: str, store: Store) -> dict:
    photo = store.require(Photo, photo_id, "Photo")
    with store.transaction():
        store.delete(photo)
    logger.info("Deleted photo %s", photo_id)
    return {"message": "Photo deleted successfully"}
