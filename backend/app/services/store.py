"""Data access layer: typed CRUD over a SQLModel session.

All SQLAlchemy exceptions are translated into ``app.errors`` kinds here, so
routers and services never inspect driver error codes or messages.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, TypeVar

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from sqlmodel import Session, SQLModel
from sqlmodel.sql.expression import SelectOfScalar

from app.errors import AppError, ConflictError, NotFoundError, PersistenceError

ModelT = TypeVar("ModelT", bound=SQLModel)


def translate_error(exc: SQLAlchemyError) -> AppError:
    """Map a SQLAlchemy exception onto a domain error kind."""
    if isinstance(exc, IntegrityError):
        detail = str(exc.orig).lower()
        if "unique" in detail or "duplicate" in detail:
            if "email" in detail:
                return ConflictError("Email already exists")
            return ConflictError("Record already exists")
        return PersistenceError()
    if isinstance(exc, (StaleDataError, NoResultFound)):
        return NotFoundError("Record not found")
    return PersistenceError()


class Store:
    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    # --- reads ---

    def get(self, model: type[ModelT], ident: Any) -> ModelT | None:
        try:
            return self._session.get(model, ident)
        except SQLAlchemyError as exc:
            raise translate_error(exc) from exc

    def require(self, model: type[ModelT], ident: Any, label: str) -> ModelT:
        """Like ``get`` but raises NotFoundError("<label> not found")."""
        obj = self.get(model, ident)
        if obj is None:
            raise NotFoundError(f"{label} not found")
        return obj

    def find_first(self, statement: SelectOfScalar[ModelT]) -> ModelT | None:
        try:
            return self._session.exec(statement).first()
        except SQLAlchemyError as exc:
            raise translate_error(exc) from exc

    def find_all(self, statement: SelectOfScalar[ModelT]) -> Sequence[ModelT]:
        try:
            return self._session.exec(statement).all()
        except SQLAlchemyError as exc:
            raise translate_error(exc) from exc

    # --- writes (flushed, committed by the caller) ---

    def add(self, obj: ModelT) -> ModelT:
        self._session.add(obj)
        self.flush()
        return obj

    def add_all(self, objs: Iterable[ModelT]) -> list[ModelT]:
        items = list(objs)
        self._session.add_all(items)
        self.flush()
        return items

    def update(self, obj: ModelT, values: dict[str, Any]) -> ModelT:
        for key, value in values.items():
            setattr(obj, key, value)
        if hasattr(obj, "updated_at"):
            obj.updated_at = datetime.now(timezone.utc)  # type: ignore[attr-defined]
        self._session.add(obj)
        self.flush()
        return obj

    def delete(self, obj: SQLModel) -> None:
        self._session.delete(obj)
        self.flush()

    def delete_where(self, model: type[SQLModel], *criteria: Any) -> int:
        """Bulk delete matching rows; returns the number removed."""
        try:
            result = self._session.execute(delete(model).where(*criteria))
        except SQLAlchemyError as exc:
            raise translate_error(exc) from exc
        return result.rowcount or 0

    # --- transaction control ---

    def flush(self) -> None:
        try:
            self._session.flush()
        except SQLAlchemyError as exc:
            raise translate_error(exc) from exc

    def commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise translate_error(exc) from exc

    def rollback(self) -> None:
        self._session.rollback()

    def discard(self, obj: SQLModel) -> None:
        """Detach ``obj`` so a fresh instance with the same key can be added."""
        self._session.expunge(obj)

    def refresh(self, obj: SQLModel) -> None:
        try:
            self._session.refresh(obj)
        except SQLAlchemyError as exc:
            raise translate_error(exc) from exc

    @contextmanager
    def transaction(self) -> Iterator[Store]:
        """Commit everything written inside the block, or nothing."""
        try:
            yield self
            self.commit()
        except AppError:
            self.rollback()
            raise
        except SQLAlchemyError as exc:
            self.rollback()
            raise translate_error(exc) from exc
