"""Charge calculation and trip billing-cycle transitions.

Everything here is free of persistence concerns: functions take ORM
instances (or anything shaped like them) and plain values, and either return
computed values or mutate the given trip in place.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from rental_billing.db.base import as_utc
from rental_billing.db.models import TripStatus

from .exceptions import ValidationError

SECONDS_PER_DAY = 24 * 60 * 60
CENT = Decimal("0.01")


class RatedCar(Protocol):
    rate_per_day: Decimal
    rate_per_km: Decimal


class BillableTrip(Protocol):
    start_date: datetime
    start_km: Decimal
    end_date: datetime | None
    end_km: Decimal | None
    offroad: int
    status: TripStatus


def _decimal(value: Decimal | float | int | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(slots=True, frozen=True)
class Reading:
    """Odometer reading taken at a point in time."""

    km: Decimal
    date: datetime

    def __post_init__(self) -> None:
        km = _decimal(self.km)
        if km < 0:
            raise ValidationError(f"Odometer reading cannot be negative (got {km})")
        object.__setattr__(self, "km", _cents(km))
        object.__setattr__(self, "date", as_utc(self.date))


@dataclass(slots=True, frozen=True)
class Rate:
    """Price per day and price per kilometre for a car."""

    per_day: Decimal
    per_km: Decimal

    def __post_init__(self) -> None:
        per_day = _decimal(self.per_day)
        per_km = _decimal(self.per_km)
        if per_day < 0 or per_km < 0:
            raise ValidationError("Rates cannot be negative")
        object.__setattr__(self, "per_day", per_day)
        object.__setattr__(self, "per_km", per_km)

    @classmethod
    def of(cls, car: RatedCar) -> "Rate":
        return cls(per_day=car.rate_per_day, per_km=car.rate_per_km)


@dataclass(slots=True, frozen=True)
class Charges:
    """Computed invoice lines for one billing period."""

    day_qty: int
    day_rate: Decimal
    day_amount: Decimal
    km_qty: Decimal
    km_rate: Decimal
    km_amount: Decimal
    offroad: int

    @property
    def total(self) -> Decimal:
        return self.day_amount + self.km_amount


def billable_days(start: datetime, end: datetime) -> int:
    """Whole days between two instants, any started day counting as a full one."""

    elapsed = (as_utc(end) - as_utc(start)).total_seconds()
    return math.ceil(elapsed / SECONDS_PER_DAY)


def compute_charges(
    start: Reading,
    end: Reading,
    rate: Rate,
    offroad: int = 0,
    round_km: bool = True,
) -> Charges:
    """Price the period between ``start`` and ``end``.

    Offroad days are deducted from the billable days only; distance is always
    charged in full. The day amount is not clamped, so more offroad days than
    elapsed days yields a negative day amount.
    """

    if end.km < start.km:
        raise ValidationError(
            f"End odometer {end.km} km is lower than start odometer {start.km} km"
        )
    if end.date < start.date:
        raise ValidationError("End date cannot be earlier than start date")

    day_qty = billable_days(start.date, end.date)
    distance = end.km - start.km
    km_qty = Decimal(math.ceil(distance)) if round_km else distance

    return Charges(
        day_qty=day_qty,
        day_rate=rate.per_day,
        day_amount=_cents((day_qty - offroad) * rate.per_day),
        km_qty=km_qty,
        km_rate=rate.per_km,
        km_amount=_cents(km_qty * rate.per_km),
        offroad=offroad,
    )


def start_reading(trip: BillableTrip) -> Reading:
    return Reading(km=trip.start_km, date=trip.start_date)


def close_period(trip: BillableTrip, end: Reading) -> None:
    """Record the end reading of the current period on the trip."""

    trip.end_km = end.km
    trip.end_date = end.date


def complete_trip(trip: BillableTrip) -> None:
    """Close the trip for good; the end reading stays set."""

    if trip.end_km is None:
        raise ValidationError("Trip has no end reading to complete with")
    trip.status = TripStatus.COMPLETED
    trip.start_km = trip.end_km


def roll_over(trip: BillableTrip) -> None:
    """Open the next billing period where the previous one ended."""

    if trip.end_km is None or trip.end_date is None:
        raise ValidationError("Trip has no end reading to roll over from")
    trip.start_date = trip.end_date
    trip.start_km = trip.end_km
    trip.end_date = None
    trip.end_km = None
    trip.offroad = 0


def advance_trip(trip: BillableTrip, continue_trip: bool) -> None:
    """Apply the post-invoice transition: roll over when continuing, else complete."""

    if continue_trip:
        roll_over(trip)
    else:
        complete_trip(trip)
