"""Tests for the Store data access layer and its error translation."""
from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError
from sqlmodel import select

from app.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from app.models.photo import Photo
from app.models.user import Award, User


def _integrity(message: str) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, Exception(message))


class TestTranslateError:
    def test_unique_email(self):
        from app.services.store import translate_error

        err = translate_error(_integrity("UNIQUE constraint failed: users.email"))
        assert isinstance(err, ConflictError)
        assert err.message == "Email already exists"

    def test_unique_other_column(self):
        from app.services.store import translate_error

        err = translate_error(_integrity("UNIQUE constraint failed: users.id"))
        assert isinstance(err, ConflictError)
        assert err.message == "Record already exists"

    def test_foreign_key_is_persistence(self):
        from app.services.store import translate_error

        err = translate_error(_integrity("FOREIGN KEY constraint failed"))
        assert isinstance(err, PersistenceError)
        assert err.status_code == 500

    def test_stale_data_is_not_found(self):
        from app.services.store import translate_error

        assert isinstance(translate_error(StaleDataError("gone")), NotFoundError)

    def test_other_errors_are_persistence(self):
        from app.services.store import translate_error

        err = translate_error(OperationalError("SELECT", {}, Exception("locked")))
        assert isinstance(err, PersistenceError)
        assert err.message == "Database operation failed"


def _user(**overrides) -> User:
    values = {"id": 1, "name": "Owner", "email": "owner@example.com"}
    values.update(overrides)
    return User(**values)


def test_require_missing_raises_labelled_not_found(store):
    with pytest.raises(NotFoundError, match="Photo not found"):
        store.require(Photo, "nope", "Photo")


def test_duplicate_email_raises_conflict(store):
    with store.transaction():
        store.add(_user())
    with pytest.raises(ConflictError, match="Email already exists"):
        with store.transaction():
            store.add(_user(id=2))
    assert store.session.get(User, 2) is None


def test_orphan_achievement_rejected_by_foreign_key(store, session):
    with pytest.raises(PersistenceError):
        with store.transaction():
            store.add(Award(user_id=99, description="Orphan"))
    assert session.exec(select(Award)).all() == []


def test_transaction_rolls_back_on_app_error(store, session):
    with pytest.raises(ValidationError):
        with store.transaction():
            store.add(_user())
            raise ValidationError("stop")
    assert session.get(User, 1) is None


def test_delete_where_returns_rowcount(store, session):
    with store.transaction():
        store.add(_user())
        store.add_all([Award(user_id=1, description=d) for d in ("a", "b", "c")])
    with store.transaction():
        removed = store.delete_where(Award, Award.user_id == 1)
    assert removed == 3
    assert session.exec(select(Award)).all() == []


def test_deleting_user_cascades_to_achievements(store, session):
    with store.transaction():
        user = store.add(_user())
        store.add(Award(user_id=1, description="kept until owner goes"))
    with store.transaction():
        store.delete(user)
    session.expire_all()
    assert session.exec(select(Award)).all() == []


def test_update_sets_updated_at(store):
    with store.transaction():
        user = store.add(_user())
    before = user.updated_at
    with store.transaction():
        store.update(user, {"bio": "new"})
    store.refresh(user)
    assert user.bio == "new"
    assert user.updated_at >= before
