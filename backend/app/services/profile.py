"""Profile aggregation: User row + achievement tables <-> nested view model.

Reads compose the singleton User and its three child collections into a
``ProfileRead``. Writes decompose a nested ``ProfileUpdate`` into a flat
User write plus delete-then-insert replacement of each achievement category
carried by the payload, all committed as one transaction. Achievement row ids
are therefore not stable across updates.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from sqlmodel import col, select

from app.errors import AppError, ConflictError, NotFoundError, ValidationError
from app.models.user import (
    PROFILE_ID,
    AboutInfo,
    AchievementsRead,
    AchievementsUpdate,
    Award,
    ProfileRead,
    ProfileStats,
    ProfileUpdate,
    Publication,
    PublicationEntry,
    Recognition,
    SocialLinks,
    User,
)
from app.services.store import Store

logger = logging.getLogger(__name__)

DEFAULT_NAME = "User"

# Shown until the owner saves a profile for the first time.
FALLBACK_PROFILE = ProfileRead(
    name="Jane Writer",
    title="Writer & Photographer",
    bio=(
        "Creative writer specializing in fiction and photography with a passion "
        "for storytelling through both words and images."
    ),
    image=(
        "https://images.unsplash.com/photo-1494790108377-be9c29b29330"
        "?q=80&w=1287&auto=format&fit=crop"
    ),
    email="jane@example.com",
    location="London, UK",
    website="https://example.com",
    social=SocialLinks(
        twitter="@janewriter",
        instagram="@janewriterphotos",
        facebook="janewriter",
    ),
    about=AboutInfo(
        education="MFA in Creative Writing from University of Arts",
        experience="10+ years of writing and photography experience",
        interests="Travel, Literature, Visual Arts",
    ),
    stats=ProfileStats(writings=24, photos=52, followers=250),
    achievements=AchievementsRead(
        awards=[
            "National Book Award Finalist 2023",
            "Photography Excellence Award 2022",
        ],
        publications=[
            PublicationEntry(
                title="The Silent Echo",
                description="Published in The New Yorker, 2023",
            ),
            PublicationEntry(
                title="Shifting Perspectives",
                description="Photo essay in National Geographic, 2022",
            ),
        ],
        recognition=[
            "Featured in Writer's Digest",
            "Photography exhibition at Modern Art Gallery",
        ],
    ),
)

# Flat column <- (nested group, nested key) for the flattened fields.
_NESTED_COLUMNS: dict[str, tuple[str, str]] = {
    "twitter_handle": ("social", "twitter"),
    "instagram_handle": ("social", "instagram"),
    "facebook_handle": ("social", "facebook"),
    "education": ("about", "education"),
    "experience": ("about", "experience"),
    "interests": ("about", "interests"),
}
_PLAIN_COLUMNS = ("title", "bio", "image", "location", "website")


@dataclass(frozen=True, slots=True)
class SaveResult:
    user: User
    created: bool

    @property
    def message(self) -> str:
        return "User created successfully" if self.created else "User updated successfully"


def _clean(value: str) -> str:
    return value.strip()


def _filter_descriptions(entries: list[str]) -> list[str]:
    """Drop empty and whitespace-only entries."""
    return [_clean(e) for e in entries if e and e.strip()]


def _filter_publications(entries: list[PublicationEntry]) -> list[PublicationEntry]:
    return [
        PublicationEntry(title=_clean(p.title), description=_clean(p.description))
        for p in entries
        if p.title.strip() or p.description.strip()
    ]


def flatten_update(payload: ProfileUpdate, *, partial: bool) -> dict[str, object]:
    """Map a nested payload onto User columns.

    With ``partial=False`` every column is written and absent values become
    ``""``; with ``partial=True`` only columns present in the payload are
    returned. ``name`` and ``email`` are left to the caller.
    """
    values: dict[str, object] = {}
    for column in _PLAIN_COLUMNS:
        value = getattr(payload, column)
        if value is not None:
            values[column] = value
        elif not partial:
            values[column] = ""

    for column, (group, key) in _NESTED_COLUMNS.items():
        nested = getattr(payload, group)
        value = getattr(nested, key) if nested is not None else None
        if value is None:
            value = getattr(payload, column)
        if value is not None:
            values[column] = value
        elif not partial:
            values[column] = ""
    return values


def require_email(payload: ProfileUpdate) -> str:
    email = (payload.email or "").strip()
    if not email:
        raise ValidationError("Email is required")
    return email


class ProfileService:
    def __init__(self, store: Store) -> None:
        self._store = store

    # --- reads ---

    def get_profile(self) -> ProfileRead:
        """Profile view of the singleton owner, or the fallback profile."""
        user = self._store.get(User, PROFILE_ID)
        if user is None:
            logger.debug("No profile saved yet, serving fallback profile")
            return FALLBACK_PROFILE
        return self.build_view(user)

    def get_profile_for(self, user_id: int) -> ProfileRead:
        user = self._store.require(User, user_id, "User")
        return self.build_view(user)

    def build_view(self, user: User) -> ProfileRead:
        return ProfileRead(
            name=user.name,
            title=user.title or "",
            bio=user.bio or "",
            image=user.image or "",
            email=user.email,
            location=user.location or "",
            website=user.website or "",
            social=SocialLinks(
                twitter=user.twitter_handle or "",
                instagram=user.instagram_handle or "",
                facebook=user.facebook_handle or "",
            ),
            about=AboutInfo(
                education=user.education or "",
                experience=user.experience or "",
                interests=user.interests or "",
            ),
            stats=ProfileStats(
                writings=user.writings_count or 0,
                photos=user.photos_count or 0,
                followers=user.followers_count or 0,
            ),
            achievements=self._load_achievements(user.id),
        )

    def _load_achievements(self, user_id: int) -> AchievementsRead:
        awards = self._store.find_all(
            select(Award).where(Award.user_id == user_id).order_by(col(Award.id))
        )
        publications = self._store.find_all(
            select(Publication)
            .where(Publication.user_id == user_id)
            .order_by(col(Publication.id))
        )
        recognitions = self._store.find_all(
            select(Recognition)
            .where(Recognition.user_id == user_id)
            .order_by(col(Recognition.id))
        )
        return AchievementsRead(
            awards=[a.description for a in awards],
            publications=[
                PublicationEntry(title=p.title, description=p.description)
                for p in publications
            ],
            recognition=[r.description for r in recognitions],
        )

    # --- writes ---

    def save_profile(self, payload: ProfileUpdate) -> SaveResult:
        """Create or update the singleton profile and replace achievements.

        Raises ValidationError before touching the database when the email
        is missing.
        """
        email = require_email(payload)
        values = flatten_update(payload, partial=False)
        values["name"] = (payload.name or "").strip() or DEFAULT_NAME
        values["email"] = email

        with self._user_transaction():
            result = self._write_user(values)
            if payload.achievements is not None:
                self.replace_achievements(result.user.id, payload.achievements)
        self._store.refresh(result.user)
        logger.info(
            "Profile %s (user %s)",
            "created" if result.created else "updated",
            result.user.id,
        )
        return result

    def create_profile(self, payload: ProfileUpdate) -> User:
        email = require_email(payload)
        if self._store.get(User, PROFILE_ID) is not None:
            raise ConflictError("Profile already exists")
        values = flatten_update(payload, partial=False)
        with self._user_transaction():
            user = self._store.add(
                User(
                    id=PROFILE_ID,
                    name=(payload.name or "").strip() or DEFAULT_NAME,
                    email=email,
                    writings_count=0,
                    photos_count=0,
                    followers_count=0,
                    **values,
                )
            )
            if payload.achievements is not None:
                self.replace_achievements(user.id, payload.achievements)
        self._store.refresh(user)
        return user

    def patch_profile(self, user_id: int, payload: ProfileUpdate) -> User:
        """Partial update: only fields present in the payload change."""
        user = self._store.require(User, user_id, "User")
        values = flatten_update(payload, partial=True)
        if payload.name is not None and payload.name.strip():
            values["name"] = payload.name.strip()
        if payload.email is not None:
            values["email"] = require_email(payload)

        with self._user_transaction():
            self._store.update(user, values)
            if payload.achievements is not None:
                self.replace_achievements(user.id, payload.achievements)
        self._store.refresh(user)
        return user

    @contextmanager
    def _user_transaction(self) -> Iterator[None]:
        """Store transaction where a row vanishing mid-write reports as the user."""
        try:
            with self._store.transaction():
                yield
        except NotFoundError as exc:
            raise NotFoundError("User not found") from exc

    def _write_user(self, values: dict[str, object]) -> SaveResult:
        """Update the existing row, falling back to a create when that fails."""
        update_error: AppError | None = None
        existing = self._store.get(User, PROFILE_ID)
        if existing is not None:
            try:
                return SaveResult(self._store.update(existing, values), created=False)
            except AppError as exc:
                # Nothing else has been written yet in this transaction.
                logger.warning("Profile update failed, trying create: %s", exc.message)
                self._store.rollback()
                self._store.discard(existing)
                update_error = exc

        try:
            user = self._store.add(
                User(
                    id=PROFILE_ID,
                    writings_count=0,
                    photos_count=0,
                    followers_count=0,
                    **values,  # type: ignore[arg-type]
                )
            )
        except AppError:
            self._store.rollback()
            if update_error is not None:
                raise update_error
            raise
        return SaveResult(user, created=True)

    def replace_achievements(self, user_id: int, achievements: AchievementsUpdate) -> None:
        """Delete-then-insert each category present; caller owns the transaction."""
        if achievements.awards is not None:
            self._store.delete_where(Award, col(Award.user_id) == user_id)
            self._store.add_all(
                Award(user_id=user_id, description=d)
                for d in _filter_descriptions(achievements.awards)
            )
        if achievements.publications is not None:
            self._store.delete_where(Publication, col(Publication.user_id) == user_id)
            self._store.add_all(
                Publication(user_id=user_id, title=p.title, description=p.description)
                for p in _filter_publications(achievements.publications)
            )
        if achievements.recognition is not None:
            self._store.delete_where(Recognition, col(Recognition.user_id) == user_id)
            self._store.add_all(
                Recognition(user_id=user_id, description=d)
                for d in _filter_descriptions(achievements.recognition)
            )
