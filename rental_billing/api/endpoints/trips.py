"""Trip lifecycle endpoints, including single-trip invoicing."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from rental_billing.api.dependencies import get_fleet_service, get_invoice_service
from rental_billing.api.errors import map_service_error
from rental_billing.schemas.envelope import ApiResponse
from rental_billing.schemas.invoice import InvoiceRead, TripEndReading, TripInvoiceRequest
from rental_billing.schemas.trip import OffroadUpdate, TripCreate, TripRead
from rental_billing.services.exceptions import ServiceError
from rental_billing.services.fleet_service import FleetService
from rental_billing.services.invoice_service import InvoiceService

router = APIRouter(prefix="/trips", tags=["trips"])


@router.post("", response_model=ApiResponse[TripRead], status_code=status.HTTP_201_CREATED)
def start_trip(
    payload: TripCreate,
    service: FleetService = Depends(get_fleet_service),
) -> ApiResponse[TripRead]:
    """Start a trip on a car."""

    try:
        trip = service.start_trip(payload)
    except ServiceError as exc:
        raise map_service_error(exc) from exc
    return ApiResponse(code=status.HTTP_201_CREATED, data=trip, message="Trip started.")


@router.get("/{trip_id}", response_model=ApiResponse[TripRead])
def get_trip(
    trip_id: str,
    service: FleetService = Depends(get_fleet_service),
) -> ApiResponse[TripRead]:
    try:
        trip = service.get_trip(trip_id)
    except ServiceError as exc:
        raise map_service_error(exc) from exc
    return ApiResponse(code=status.HTTP_200_OK, data=trip, message="Trip retrieved.")


@router.post("/{trip_id}/offroad", response_model=ApiResponse[TripRead])
def add_offroad_days(
    trip_id: str,
    payload: OffroadUpdate,
    service: FleetService = Depends(get_fleet_service),
) -> ApiResponse[TripRead]:
    """Exclude days of the current period from day-rate billing."""

    try:
        trip = service.add_offroad(trip_id, payload)
    except ServiceError as exc:
        raise map_service_error(exc) from exc
    return ApiResponse(code=status.HTTP_200_OK, data=trip, message="Offroad days recorded.")


@router.post(
    "/{trip_id}/invoice",
    response_model=ApiResponse[InvoiceRead],
    status_code=status.HTTP_201_CREATED,
)
def invoice_trip(
    trip_id: str,
    payload: TripInvoiceRequest,
    service: InvoiceService = Depends(get_invoice_service),
) -> ApiResponse[InvoiceRead]:
    """Close the current billing period of one trip."""

    reading = TripEndReading(trip_id=trip_id, km=payload.km, date=payload.date)
    try:
        invoice = service.generate_for_trip(trip_id, reading, payload.continue_trip)
    except ServiceError as exc:
        raise map_service_error(exc) from exc
    return ApiResponse(code=status.HTTP_201_CREATED, data=invoice, message="Invoice generated successfully.")
