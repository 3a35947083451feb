"""Profile owner and the achievement collections it owns."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Integer
from sqlmodel import Field, SQLModel

from app.models.common import CamelModel, utcnow

# One profile per deployment; the constant key makes a second create collide.
PROFILE_ID = 1


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: int = Field(default=PROFILE_ID, primary_key=True)
    name: str
    title: str = Field(default="")
    bio: str = Field(default="")
    image: str = Field(default="")
    email: str = Field(unique=True, index=True)
    location: str = Field(default="")
    website: str = Field(default="")

    twitter_handle: str = Field(default="")
    instagram_handle: str = Field(default="")
    facebook_handle: str = Field(default="")

    education: str = Field(default="")
    experience: str = Field(default="")
    interests: str = Field(default="")

    writings_count: int = Field(default=0)
    photos_count: int = Field(default=0)
    followers_count: int = Field(default=0)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


def _owner_column() -> Column:
    return Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


class Award(SQLModel, table=True):
    __tablename__ = "awards"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(sa_column=_owner_column())
    description: str
    created_at: datetime = Field(default_factory=utcnow)


class Publication(SQLModel, table=True):
    __tablename__ = "publications"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(sa_column=_owner_column())
    title: str = Field(default="")
    description: str = Field(default="")
    created_at: datetime = Field(default_factory=utcnow)


class Recognition(SQLModel, table=True):
    __tablename__ = "recognitions"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(sa_column=_owner_column())
    description: str
    created_at: datetime = Field(default_factory=utcnow)


# --- Request/response schemas ---


class UserRead(CamelModel):
    id: int
    name: str
    title: str
    bio: str
    image: str
    email: str
    location: str
    website: str
    twitter_handle: str
    instagram_handle: str
    facebook_handle: str
    education: str
    experience: str
    interests: str
    writings_count: int
    photos_count: int
    followers_count: int
    created_at: datetime
    updated_at: datetime


class SocialLinks(CamelModel):
    twitter: str | None = None
    instagram: str | None = None
    facebook: str | None = None


class AboutInfo(CamelModel):
    education: str | None = None
    experience: str | None = None
    interests: str | None = None


class ProfileStats(CamelModel):
    writings: int = 0
    photos: int = 0
    followers: int = 0


class PublicationEntry(CamelModel):
    title: str = ""
    description: str = ""


class AchievementsUpdate(CamelModel):
    """Each category left as None is not touched; a list replaces the set."""

    awards: list[str] | None = None
    publications: list[PublicationEntry] | None = None
    recognition: list[str] | None = None


class AchievementsRead(CamelModel):
    awards: list[str] = []
    publications: list[PublicationEntry] = []
    recognition: list[str] = []


class ProfileUpdate(CamelModel):
    """Nested or flat profile payload; nested ``social``/``about`` win."""

    name: str | None = None
    title: str | None = None
    bio: str | None = None
    image: str | None = None
    email: str | None = None
    location: str | None = None
    website: str | None = None

    social: SocialLinks | None = None
    about: AboutInfo | None = None

    twitter_handle: str | None = None
    instagram_handle: str | None = None
    facebook_handle: str | None = None
    education: str | None = None
    experience: str | None = None
    interests: str | None = None

    achievements: AchievementsUpdate | None = None


class ProfileRead(CamelModel):
    name: str
    title: str
    bio: str
    image: str
    email: str
    location: str
    website: str
    social: SocialLinks
    about: AboutInfo
    stats: ProfileStats
    achievements: AchievementsRead


class ProfileSaved(CamelModel):
    message: str
    user: UserRead
