"""Unit tests for ProfileService write paths and payload flattening."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.user import (
    AboutInfo,
    AchievementsUpdate,
    ProfileUpdate,
    PublicationEntry,
    SocialLinks,
    User,
)
from app.services.profile import (
    FALLBACK_PROFILE,
    ProfileService,
    SaveResult,
    flatten_update,
    require_email,
)
from app.services.store import Store


class TestFlattenUpdate:
    def test_full_write_fills_absent_columns(self):
        values = flatten_update(ProfileUpdate(email="a@b.c", bio="Hi"), partial=False)
        assert values["bio"] == "Hi"
        assert values["title"] == ""
        assert values["twitter_handle"] == ""
        assert values["interests"] == ""
        assert "name" not in values
        assert "email" not in values

    def test_partial_write_only_present_columns(self):
        values = flatten_update(
            ProfileUpdate(about=AboutInfo(experience="10 years")), partial=True
        )
        assert values == {"experience": "10 years"}

    def test_nested_wins_over_flat(self):
        payload = ProfileUpdate(
            social=SocialLinks(twitter="@nested"),
            twitter_handle="@flat",
            instagram_handle="@insta",
        )
        values = flatten_update(payload, partial=True)
        assert values["twitter_handle"] == "@nested"
        assert values["instagram_handle"] == "@insta"

    def test_camel_case_payload(self):
        payload = ProfileUpdate.model_validate(
            {"facebookHandle": "fb", "about": {"education": "PhD"}}
        )
        values = flatten_update(payload, partial=True)
        assert values == {"facebook_handle": "fb", "education": "PhD"}


def test_require_email_strips():
    assert require_email(ProfileUpdate(email="  me@example.com ")) == "me@example.com"


def test_require_email_missing():
    with pytest.raises(ValidationError, match="Email is required"):
        require_email(ProfileUpdate(name="x"))


def test_save_result_message():
    user = User(name="n", email="e@x")
    assert SaveResult(user, created=True).message == "User created successfully"
    assert SaveResult(user, created=False).message == "User updated successfully"


def test_fallback_profile_literals():
    assert FALLBACK_PROFILE.name == "Jane Writer"
    assert FALLBACK_PROFILE.stats.writings == 24
    assert FALLBACK_PROFILE.stats.photos == 52
    assert FALLBACK_PROFILE.stats.followers == 250


# --- update-then-create fallthrough ---


def _mock_store(existing: User | None) -> MagicMock:
    store = MagicMock(spec=Store)
    store.get.return_value = existing
    return store


def test_write_user_falls_through_to_create_when_update_fails():
    existing = User(name="Old", email="old@example.com")
    store = _mock_store(existing)
    store.update.side_effect = NotFoundError("Record not found")
    store.add.side_effect = lambda obj: obj

    result = ProfileService(store)._write_user({"name": "New", "email": "new@example.com"})

    assert result.created is True
    assert result.user.email == "new@example.com"
    assert result.user.writings_count == 0
    store.rollback.assert_called_once()
    store.discard.assert_called_once_with(existing)


def test_write_user_raises_update_error_when_create_also_fails():
    store = _mock_store(User(name="Old", email="old@example.com"))
    update_error = ConflictError("Email already exists")
    store.update.side_effect = update_error
    store.add.side_effect = ConflictError("Record already exists")

    with pytest.raises(ConflictError) as excinfo:
        ProfileService(store)._write_user({"name": "n", "email": "taken@example.com"})
    assert excinfo.value is update_error


def test_write_user_creates_when_missing():
    store = _mock_store(None)
    store.add.side_effect = lambda obj: obj

    result = ProfileService(store)._write_user({"name": "n", "email": "e@example.com"})

    assert result.created is True
    assert result.user.id == 1
    store.update.assert_not_called()


def test_write_user_updates_in_place():
    existing = User(name="Old", email="old@example.com")
    store = _mock_store(existing)
    store.update.side_effect = lambda obj, values: obj

    result = ProfileService(store)._write_user({"name": "New", "email": "old@example.com"})

    assert result.created is False
    assert result.user is existing
    store.add.assert_not_called()


# --- against a real session ---


def test_save_profile_missing_email_writes_nothing(store, session):
    service = ProfileService(store)
    with pytest.raises(ValidationError):
        service.save_profile(ProfileUpdate(name="Nope"))
    assert session.get(User, 1) is None


def test_replace_achievements_strips_entries(store, session):
    service = ProfileService(store)
    service.save_profile(
        ProfileUpdate(
            email="s@example.com",
            achievements=AchievementsUpdate(
                awards=["  Padded  "],
                publications=[PublicationEntry(title=" T ", description=" D ")],
            ),
        )
    )
    view = service.get_profile()
    assert view.achievements.awards == ["Padded"]
    assert view.achievements.publications == [PublicationEntry(title="T", description="D")]
    assert view.achievements.recognition == []


def test_get_profile_for_missing_user(store):
    with pytest.raises(NotFoundError, match="User not found"):
        ProfileService(store).get_profile_for(7)
