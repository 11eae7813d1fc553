"""Pydantic schemas for trip lifecycle endpoints."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, PositiveInt

from rental_billing.db.models import TripStatus


class TripCreate(BaseModel):
    """Start a trip on a car; the start reading defaults to the car's odometer and now."""

    registration_no: str = Field(..., min_length=1, max_length=32)
    start_km: NonNegativeFloat | None = None
    start_date: datetime | None = None


class OffroadUpdate(BaseModel):
    """Days to exclude from day-rate billing for the current period."""

    days: PositiveInt


class BillingCycleRead(BaseModel):
    """Month for which a trip was invoiced by the monthly run."""

    year: int
    month: int
    generated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TripRead(BaseModel):
    """Trip representation returned to clients."""

    id: str
    car_id: str
    start_date: datetime
    start_km: float
    end_date: datetime | None
    end_km: float | None
    offroad: int
    status: TripStatus
    generated: list[BillingCycleRead]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
