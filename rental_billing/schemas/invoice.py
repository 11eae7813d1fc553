"""Pydantic schemas for invoice generation and reporting."""
from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, NonNegativeFloat, field_validator

from .owner import OwnerRead


class TripEndReading(BaseModel):
    """End odometer reading for one trip. ``date`` defaults to the time of the call."""

    trip_id: str = Field(..., validation_alias=AliasChoices("trip_id", "id"))
    km: NonNegativeFloat
    date: datetime | None = None


class OwnerEndReading(BaseModel):
    """End odometer reading applied to every due trip of an owner's cars."""

    email: str = Field(..., min_length=3, max_length=320)
    km: NonNegativeFloat

    @field_validator("email")
    @classmethod
    def email_lower(cls, value: str) -> str:
        return value.strip().lower()


class GenerateInvoiceRequest(BaseModel):
    """Close the current period of every ongoing trip on a car."""

    registration_no: str = Field(..., min_length=1, max_length=32)
    continue_trip: bool = Field(..., validation_alias=AliasChoices("continue_trip", "status"))
    readings: list[TripEndReading]

    @field_validator("registration_no")
    @classmethod
    def registration_upper(cls, value: str) -> str:
        return value.strip().upper()


class MonthlyInvoiceRequest(BaseModel):
    """Owner readings for the monthly batch run."""

    readings: list[OwnerEndReading]


class InvoiceRead(BaseModel):
    """Invoice representation returned to clients."""

    id: str
    owner_id: str
    trip_id: str
    car_id: str
    model: str
    day_qty: int
    day_rate: float
    day_amount: float
    km_qty: float
    km_rate: float
    km_amount: float
    total_amount: float
    offroad: int
    invoice_date: datetime

    class Config:
        from_attributes = True


class ModelInvoiceGroup(BaseModel):
    """Invoices of one car model within an owner's group."""

    model: str
    invoices: list[InvoiceRead]


class OwnerInvoiceGroup(BaseModel):
    """Invoices of one owner, grouped by car model."""

    owner: OwnerRead
    models: list[ModelInvoiceGroup]


class TripInvoiceRequest(BaseModel):
    """Close the current period of a single trip."""

    km: NonNegativeFloat
    date: datetime | None = None
    continue_trip: bool = Field(..., validation_alias=AliasChoices("continue_trip", "status"))
