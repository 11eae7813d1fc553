"""Session-bound repository base shared by every entity."""
from __future__ import annotations

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from rental_billing.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """Data access for one ORM model. Queries return rows in insertion order."""

    model: type[ModelT]

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, instance: ModelT) -> ModelT:
        self.session.add(instance)
        return instance

    def get(self, obj_id: str) -> ModelT | None:
        return self.first_where(self.model.id == obj_id)  # type: ignore[attr-defined]

    def first_where(self, *criteria: Any) -> ModelT | None:
        """First row in insertion order matching all ``criteria``."""

        return self.session.scalar(self._base_query().where(*criteria))

    def list(self, offset: int = 0, limit: int = 100) -> Sequence[ModelT]:
        return self.session.scalars(self._base_query().offset(offset).limit(limit)).all()

    def delete(self, instance: ModelT) -> None:
        self.session.delete(instance)

    def _base_query(self) -> Select[tuple[ModelT]]:
        # repositories only wrap TimestampMixin models; created_at is the storage order, id breaks ties
        return select(self.model).order_by(self.model.created_at, self.model.id)  # type: ignore[attr-defined]
