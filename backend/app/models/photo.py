"""Photo model: gallery images hosted on the upload CDN."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from pydantic import computed_field
from sqlmodel import Field, SQLModel

from app.models.common import CamelModel, utcnow


class Photo(SQLModel, table=True):
    __tablename__ = "photos"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    url: str
    title: str | None = Field(default=None)
    filename: str
    path: str
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)


# --- Pydantic schemas ---


class PhotoCreate(CamelModel):
    url: str | None = None
    title: str | None = None
    filename: str | None = None
    path: str | None = None


class PhotoUpdate(CamelModel):
    url: str | None = None
    title: str | None = None
    filename: str | None = None
    path: str | None = None


class PhotoRead(CamelModel):
    id: str
    url: str
    title: str | None
    filename: str
    path: str
    created_at: datetime
    updated_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def date(self) -> str:
        """Display date, e.g. "March 4, 2025"."""
        return f"{self.created_at:%B} {self.created_at.day}, {self.created_at.year}"
