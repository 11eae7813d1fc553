"""Pydantic schemas exposed by the API layer."""
from .envelope import ApiError, ApiResponse
from .owner import OwnerCreate, OwnerRead
from .car import CarCreate, CarRead
from .trip import BillingCycleRead, OffroadUpdate, TripCreate, TripRead
from .invoice import (
    GenerateInvoiceRequest,
    InvoiceRead,
    ModelInvoiceGroup,
    MonthlyInvoiceRequest,
    OwnerEndReading,
    OwnerInvoiceGroup,
    TripEndReading,
    TripInvoiceRequest,
)

__all__ = [
    "ApiError",
    "ApiResponse",
    "OwnerCreate",
    "OwnerRead",
    "CarCreate",
    "CarRead",
    "BillingCycleRead",
    "OffroadUpdate",
    "TripCreate",
    "TripRead",
    "GenerateInvoiceRequest",
    "InvoiceRead",
    "ModelInvoiceGroup",
    "MonthlyInvoiceRequest",
    "OwnerEndReading",
    "OwnerInvoiceGroup",
    "TripEndReading",
    "TripInvoiceRequest",
]
