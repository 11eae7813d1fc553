"""Invoice generation: per-car period closing, monthly batch runs and reporting."""
from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from rental_billing.core.database import transaction
from rental_billing.db.base import as_utc, utcnow
from rental_billing.db.models import Car, Invoice, Trip, TripStatus
from rental_billing.repositories.car import CarRepository
from rental_billing.repositories.invoice import InvoiceRepository
from rental_billing.repositories.trip import TripRepository
from rental_billing.schemas.invoice import (
    GenerateInvoiceRequest,
    InvoiceRead,
    MonthlyInvoiceRequest,
    OwnerInvoiceGroup,
    TripEndReading,
)

from .billing import Charges, Rate, Reading, advance_trip, close_period, compute_charges, start_reading
from .exceptions import ConflictError, MissingInputError, NotFoundError, ValidationError
from .reporting import group_by_owner_and_model

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class InvoiceService:
    """Computes charges, persists invoices and moves trips to their next billing period."""

    def __init__(self, session: Session, clock: Clock = utcnow) -> None:
        self.session = session
        self.clock = clock
        self.cars = CarRepository(session)
        self.trips = TripRepository(session)
        self.invoices = InvoiceRepository(session)

    def generate_for_car(self, payload: GenerateInvoiceRequest) -> list[InvoiceRead]:
        """Close the current period of every ongoing trip on a car, one invoice per trip."""

        car = self.cars.get_by_registration(payload.registration_no)
        if car is None:
            raise NotFoundError(f"Car {payload.registration_no} not found")

        trips = self.trips.list_ongoing_for_car(car.id)
        counts = Counter(reading.trip_id for reading in payload.readings)
        repeated = sorted(trip_id for trip_id, count in counts.items() if count > 1)
        if repeated:
            raise ValidationError(f"More than one reading supplied for trips: {', '.join(repeated)}")
        readings = {reading.trip_id: reading for reading in payload.readings}

        unknown = sorted(set(readings) - {trip.id for trip in trips})
        if unknown:
            raise ValidationError(
                f"Readings supplied for trips that are not ongoing on car {car.registration_no}: {', '.join(unknown)}"
            )
        missing = [trip.id for trip in trips if trip.id not in readings]
        if missing:
            raise MissingInputError(f"End reading not provided for trips: {', '.join(missing)}")

        now = as_utc(self.clock())
        with transaction(self.session):
            created = [
                self._close_trip_period(trip, car, readings[trip.id], payload.continue_trip, now)
                for trip in trips
            ]

        logger.info(
            "Generated %d invoice(s) for car %s (continue=%s)",
            len(created),
            car.registration_no,
            payload.continue_trip,
        )
        return [InvoiceRead.model_validate(invoice) for invoice in created]

    def generate_for_trip(self, trip_id: str, reading: TripEndReading, continue_trip: bool) -> InvoiceRead:
        """Close the current period of a single trip."""

        trip = self.trips.get_with_car(trip_id)
        if trip is None:
            raise NotFoundError(f"Trip {trip_id} not found")
        if trip.status is not TripStatus.ONGOING:
            raise ConflictError(f"Trip {trip_id} is already completed")

        now = as_utc(self.clock())
        with transaction(self.session):
            invoice = self._close_trip_period(trip, trip.car, reading, continue_trip, now)

        logger.info("Generated invoice %s for trip %s", invoice.id, trip_id)
        return InvoiceRead.model_validate(invoice)

    def generate_for_month(self, payload: MonthlyInvoiceRequest) -> list[InvoiceRead]:
        """Invoice every ongoing trip not yet billed this calendar month.

        One reading per owner email is applied to all of that owner's due
        trips. Offroad days are not deducted on this path. The whole run is
        one unit of work, so a failure on any trip leaves nothing billed.
        """

        now = as_utc(self.clock())
        due = self.trips.list_due_for_month(now.year, now.month)
        if not due:
            raise NotFoundError("No trips found to generate invoices.")
        if not payload.readings:
            raise MissingInputError("End kilometers are required.")

        km_by_email = {reading.email: Decimal(str(reading.km)) for reading in payload.readings}
        missing_owners: list[str] = []
        for trip in due:
            if trip.car is None:
                raise NotFoundError(f"Car for trip {trip.id} not found.")
            email = trip.car.owner.email
            if email not in km_by_email and email not in missing_owners:
                missing_owners.append(email)
        if missing_owners:
            raise MissingInputError(
                f"End kilometer not provided for owner(s) with email {', '.join(missing_owners)}."
            )

        created: list[Invoice] = []
        with transaction(self.session):
            for trip in due:
                car = trip.car
                end = Reading(km=km_by_email[car.owner.email], date=now)
                charges = compute_charges(start_reading(trip), end, Rate.of(car), offroad=0, round_km=False)
                close_period(trip, end)
                created.append(self._record_invoice(trip, car, charges, now))
                car.current_km = end.km
                self.trips.mark_generated(trip, now.year, now.month)

        logger.info("Monthly run %04d-%02d generated %d invoice(s)", now.year, now.month, len(created))
        return [InvoiceRead.model_validate(invoice) for invoice in created]

    def list(self) -> list[InvoiceRead]:
        return [InvoiceRead.model_validate(row) for row in self.invoices.list_with_owner()]

    def list_grouped(self) -> list[OwnerInvoiceGroup]:
        """Invoices nested by owner and car model."""

        rows = self.invoices.list_with_owner()
        if not rows:
            raise NotFoundError("No invoices found in the database.")
        return group_by_owner_and_model(rows)

    def _close_trip_period(
        self,
        trip: Trip,
        car: Car,
        reading: TripEndReading,
        continue_trip: bool,
        now: datetime,
    ) -> Invoice:
        end = Reading(km=Decimal(str(reading.km)), date=reading.date or now)
        charges = compute_charges(start_reading(trip), end, Rate.of(car), offroad=trip.offroad)
        close_period(trip, end)
        invoice = self._record_invoice(trip, car, charges, now)
        if end.km > car.current_km:
            car.current_km = end.km
        advance_trip(trip, continue_trip)
        return invoice

    def _record_invoice(self, trip: Trip, car: Car, charges: Charges, now: datetime) -> Invoice:
        invoice = Invoice(
            owner_id=car.owner_id,
            trip_id=trip.id,
            car_id=car.id,
            model=car.model,
            day_qty=charges.day_qty,
            day_rate=charges.day_rate,
            day_amount=charges.day_amount,
            km_qty=charges.km_qty,
            km_rate=charges.km_rate,
            km_amount=charges.km_amount,
            total_amount=charges.total,
            offroad=charges.offroad,
            invoice_date=now,
        )
        self.invoices.add(invoice)
        self.session.flush()
        return invoice
