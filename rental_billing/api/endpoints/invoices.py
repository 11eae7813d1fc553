"""Invoice generation and reporting endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from rental_billing.api.dependencies import get_invoice_service
from rental_billing.api.errors import map_service_error
from rental_billing.schemas.envelope import ApiResponse
from rental_billing.schemas.invoice import (
    GenerateInvoiceRequest,
    InvoiceRead,
    MonthlyInvoiceRequest,
    OwnerInvoiceGroup,
)
from rental_billing.services.exceptions import ServiceError
from rental_billing.services.invoice_service import InvoiceService

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.post(
    "/generate",
    response_model=ApiResponse[list[InvoiceRead]],
    status_code=status.HTTP_201_CREATED,
)
def generate_invoices(
    payload: GenerateInvoiceRequest,
    service: InvoiceService = Depends(get_invoice_service),
) -> ApiResponse[list[InvoiceRead]]:
    """Close the current period of every ongoing trip on a car."""

    try:
        invoices = service.generate_for_car(payload)
    except ServiceError as exc:
        raise map_service_error(exc) from exc
    return ApiResponse(code=status.HTTP_201_CREATED, data=invoices, message="Invoices generated successfully.")


@router.post(
    "/generate-monthly",
    response_model=ApiResponse[list[InvoiceRead]],
    status_code=status.HTTP_201_CREATED,
)
def generate_monthly_invoices(
    payload: MonthlyInvoiceRequest,
    service: InvoiceService = Depends(get_invoice_service),
) -> ApiResponse[list[InvoiceRead]]:
    """Invoice every ongoing trip not yet billed this month."""

    try:
        invoices = service.generate_for_month(payload)
    except ServiceError as exc:
        raise map_service_error(exc) from exc
    return ApiResponse(code=status.HTTP_201_CREATED, data=invoices, message="Invoices generated successfully.")


@router.get("", response_model=ApiResponse[list[InvoiceRead]])
def list_invoices(
    service: InvoiceService = Depends(get_invoice_service),
) -> ApiResponse[list[InvoiceRead]]:
    """List all invoices."""

    return ApiResponse(code=status.HTTP_200_OK, data=service.list(), message="Invoices retrieved successfully.")


@router.get("/grouped", response_model=ApiResponse[list[OwnerInvoiceGroup]])
def list_invoices_grouped(
    service: InvoiceService = Depends(get_invoice_service),
) -> ApiResponse[list[OwnerInvoiceGroup]]:
    """List invoices nested by owner and car model."""

    try:
        groups = service.list_grouped()
    except ServiceError as exc:
        raise map_service_error(exc) from exc
    return ApiResponse(code=status.HTTP_200_OK, data=groups, message="All invoices retrieved successfully.")
