"""FastAPI dependency providers binding services to a request session."""
from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from rental_billing.core.database import get_db_session
from rental_billing.services.fleet_service import FleetService
from rental_billing.services.invoice_service import InvoiceService


def get_invoice_service(session: Session = Depends(get_db_session)) -> InvoiceService:
    """Provide invoice service with database session."""

    return InvoiceService(session)


def get_fleet_service(session: Session = Depends(get_db_session)) -> FleetService:
    """Provide fleet record service with database session."""

    return FleetService(session)
