"""Invoice repository."""
from __future__ import annotations

from sqlalchemy import Select
from sqlalchemy.orm import joinedload

from rental_billing.db.models import Invoice

from .base import Repository


class InvoiceRepository(Repository[Invoice]):
    """Invoice persistence helpers. Invoices are only ever created and read."""

    model = Invoice

    def list_with_owner(self) -> list[Invoice]:
        """All invoices in storage order with their owner loaded."""

        statement: Select[tuple[Invoice]] = self._base_query().options(joinedload(self.model.owner))
        return list(self.session.scalars(statement).all())
