"""Writing model: essays, poems and stories with an external content reference."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from app.models.common import CamelModel, utcnow

REQUIRED_WRITING_FIELDS = ("title", "category", "description", "image", "content_url")


class Writing(SQLModel, table=True):
    __tablename__ = "writings"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    title: str
    category: str = Field(index=True)
    description: str
    image: str
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    content_url: str  # remote URL or data:text/plain;base64,... for inline text
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)


# --- Pydantic schemas ---


class WritingCreate(CamelModel):
    title: str | None = None
    category: str | None = None
    description: str | None = None
    image: str | None = None
    tags: list[str] | None = None
    content_url: str | None = None
    # Inline text, stored as a data URL when no contentUrl is given
    content: str | None = None


class WritingUpdate(CamelModel):
    title: str | None = None
    category: str | None = None
    description: str | None = None
    image: str | None = None
    tags: list[str] | None = None
    content_url: str | None = None


class WritingRead(CamelModel):
    id: str
    title: str
    category: str
    description: str
    image: str
    tags: list[str]
    content_url: str
    created_at: datetime
    updated_at: datetime


class WritingSaved(CamelModel):
    message: str
    writing: WritingRead


class WritingContent(CamelModel):
    id: str
    source: str  # "inline" or "remote"
    content: str
