"""Pydantic schemas for car registration."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, field_validator


class CarCreate(BaseModel):
    """Payload to register a car under an owner."""

    owner_id: str
    registration_no: str = Field(..., min_length=1, max_length=32)
    model: str = Field(..., min_length=1, max_length=255)
    rate_per_day: NonNegativeFloat
    rate_per_km: NonNegativeFloat
    current_km: NonNegativeFloat = 0

    @field_validator("registration_no")
    @classmethod
    def registration_upper(cls, value: str) -> str:
        return value.strip().upper()


class CarRead(BaseModel):
    """Car representation returned to clients."""

    id: str
    owner_id: str
    registration_no: str
    model: str
    rate_per_day: float
    rate_per_km: float
    current_km: float
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
