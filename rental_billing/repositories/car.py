"""Repository for car entities."""
from __future__ import annotations

from sqlalchemy.orm import selectinload

from rental_billing.db.models import Car

from .base import Repository


class CarRepository(Repository[Car]):
    """Car repository keyed by registration number."""

    model = Car

    def get_by_registration(self, registration_no: str) -> Car | None:
        statement = (
            self._base_query()
            .options(selectinload(self.model.owner))
            .where(self.model.registration_no == registration_no)
        )
        return self.session.scalar(statement)
