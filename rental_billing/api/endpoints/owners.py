"""Owner endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from rental_billing.api.dependencies import get_fleet_service
from rental_billing.api.errors import map_service_error
from rental_billing.schemas.envelope import ApiResponse
from rental_billing.schemas.owner import OwnerCreate, OwnerRead
from rental_billing.services.exceptions import ServiceError
from rental_billing.services.fleet_service import FleetService

router = APIRouter(prefix="/owners", tags=["owners"])


@router.post("", response_model=ApiResponse[OwnerRead], status_code=status.HTTP_201_CREATED)
def create_owner(
    payload: OwnerCreate,
    service: FleetService = Depends(get_fleet_service),
) -> ApiResponse[OwnerRead]:
    """Register a car owner."""

    try:
        owner = service.create_owner(payload)
    except ServiceError as exc:
        raise map_service_error(exc) from exc
    return ApiResponse(code=status.HTTP_201_CREATED, data=owner, message="Owner created.")


@router.get("", response_model=ApiResponse[list[OwnerRead]])
def list_owners(
    service: FleetService = Depends(get_fleet_service),
) -> ApiResponse[list[OwnerRead]]:
    return ApiResponse(code=status.HTTP_200_OK, data=service.list_owners(), message="Owners retrieved.")
