"""Car endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from rental_billing.api.dependencies import get_fleet_service
from rental_billing.api.errors import map_service_error
from rental_billing.schemas.car import CarCreate, CarRead
from rental_billing.schemas.envelope import ApiResponse
from rental_billing.services.exceptions import ServiceError
from rental_billing.services.fleet_service import FleetService

router = APIRouter(prefix="/cars", tags=["cars"])


@router.post("", response_model=ApiResponse[CarRead], status_code=status.HTTP_201_CREATED)
def register_car(
    payload: CarCreate,
    service: FleetService = Depends(get_fleet_service),
) -> ApiResponse[CarRead]:
    """Register a car and its tariff under an owner."""

    try:
        car = service.register_car(payload)
    except ServiceError as exc:
        raise map_service_error(exc) from exc
    return ApiResponse(code=status.HTTP_201_CREATED, data=car, message="Car registered.")


@router.get("/{registration_no}", response_model=ApiResponse[CarRead])
def get_car(
    registration_no: str,
    service: FleetService = Depends(get_fleet_service),
) -> ApiResponse[CarRead]:
    try:
        car = service.get_car(registration_no)
    except ServiceError as exc:
        raise map_service_error(exc) from exc
    return ApiResponse(code=status.HTTP_200_OK, data=car, message="Car retrieved.")
