"""Repository for owner entities."""
from __future__ import annotations

from rental_billing.db.models import Owner

from .base import Repository


class OwnerRepository(Repository[Owner]):
    """Owner repository with lookup by email."""

    model = Owner

    def get_by_email(self, email: str) -> Owner | None:
        return self.first_where(self.model.email == email)
