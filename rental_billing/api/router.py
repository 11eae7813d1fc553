"""Root API router for REST endpoints."""
from fastapi import APIRouter

from rental_billing.api.endpoints import cars, invoices, owners, trips

router = APIRouter()


@router.get("/health", tags=["health"], summary="Health check")
def health_check() -> dict[str, str]:
    """Return basic service health information."""

    return {"status": "ok"}


router.include_router(owners.router)
router.include_router(cars.router)
router.include_router(trips.router)
router.include_router(invoices.router)
