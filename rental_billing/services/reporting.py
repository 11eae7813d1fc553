"""Read-side reshaping of invoices into owner and model groups."""
from __future__ import annotations

from collections.abc import Iterable

from rental_billing.db.models import Invoice
from rental_billing.schemas.invoice import InvoiceRead, ModelInvoiceGroup, OwnerInvoiceGroup
from rental_billing.schemas.owner import OwnerRead


def group_by_owner_and_model(invoices: Iterable[Invoice]) -> list[OwnerInvoiceGroup]:
    """Nest invoices as owner -> car model -> invoices.

    Owners and models keep the order in which they are first seen; invoices
    keep their input order within a model.
    """

    owners: dict[str, OwnerRead] = {}
    grouped: dict[str, dict[str, list[InvoiceRead]]] = {}

    for invoice in invoices:
        owner_id = invoice.owner.id
        if owner_id not in owners:
            owners[owner_id] = OwnerRead.model_validate(invoice.owner)
            grouped[owner_id] = {}
        grouped[owner_id].setdefault(invoice.model, []).append(InvoiceRead.model_validate(invoice))

    return [
        OwnerInvoiceGroup(
            owner=owners[owner_id],
            models=[ModelInvoiceGroup(model=model, invoices=rows) for model, rows in by_model.items()],
        )
        for owner_id, by_model in grouped.items()
    ]
