"""Owner, car and trip record management."""
from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rental_billing.db.base import utcnow
from rental_billing.db.models import Car, Owner, Trip, TripStatus
from rental_billing.repositories.car import CarRepository
from rental_billing.repositories.owner import OwnerRepository
from rental_billing.repositories.trip import TripRepository
from rental_billing.schemas.car import CarCreate, CarRead
from rental_billing.schemas.owner import OwnerCreate, OwnerRead
from rental_billing.schemas.trip import OffroadUpdate, TripCreate, TripRead

from .billing import Reading
from .exceptions import ConflictError, NotFoundError


class FleetService:
    """Service responsible for the records billing runs operate on."""

    def __init__(self, session: Session, clock: Callable[[], datetime] = utcnow) -> None:
        self.session = session
        self.clock = clock
        self.owners = OwnerRepository(session)
        self.cars = CarRepository(session)
        self.trips = TripRepository(session)

    def create_owner(self, payload: OwnerCreate) -> OwnerRead:
        if self.owners.get_by_email(payload.email) is not None:
            raise ConflictError(f"Owner with email {payload.email} already exists")

        owner = self.owners.add(Owner(name=payload.name, email=payload.email))
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError(f"Owner with email {payload.email} already exists") from exc
        self.session.refresh(owner)
        return OwnerRead.model_validate(owner)

    def list_owners(self) -> list[OwnerRead]:
        return [OwnerRead.model_validate(row) for row in self.owners.list(limit=1000)]

    def register_car(self, payload: CarCreate) -> CarRead:
        if self.owners.get(payload.owner_id) is None:
            raise NotFoundError(f"Owner {payload.owner_id} not found")

        car = self.cars.add(
            Car(
                owner_id=payload.owner_id,
                registration_no=payload.registration_no,
                model=payload.model,
                rate_per_day=Decimal(str(payload.rate_per_day)),
                rate_per_km=Decimal(str(payload.rate_per_km)),
                current_km=Decimal(str(payload.current_km)),
            )
        )
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError(f"Car {payload.registration_no} is already registered") from exc
        self.session.refresh(car)
        return CarRead.model_validate(car)

    def get_car(self, registration_no: str) -> CarRead:
        car = self.cars.get_by_registration(registration_no.strip().upper())
        if car is None:
            raise NotFoundError(f"Car {registration_no} not found")
        return CarRead.model_validate(car)

    def start_trip(self, payload: TripCreate) -> TripRead:
        car = self.cars.get_by_registration(payload.registration_no.strip().upper())
        if car is None:
            raise NotFoundError(f"Car {payload.registration_no} not found")

        start_km = car.current_km if payload.start_km is None else payload.start_km
        start = Reading(km=start_km, date=payload.start_date or self.clock())
        trip = self.trips.add(
            Trip(
                car=car,
                start_km=start.km,
                start_date=start.date,
                offroad=0,
                status=TripStatus.ONGOING,
            )
        )
        car.current_km = start.km
        self.session.commit()
        self.session.refresh(trip)
        return TripRead.model_validate(trip)

    def get_trip(self, trip_id: str) -> TripRead:
        return TripRead.model_validate(self._get_trip(trip_id))

    def add_offroad(self, trip_id: str, payload: OffroadUpdate) -> TripRead:
        """Exclude additional days of the current period from day-rate billing."""

        trip = self._get_trip(trip_id)
        if trip.status is not TripStatus.ONGOING:
            raise ConflictError("Offroad days can only be added to ongoing trips")
        trip.offroad += payload.days
        self.session.commit()
        self.session.refresh(trip)
        return TripRead.model_validate(trip)

    def _get_trip(self, trip_id: str) -> Trip:
        trip = self.trips.get(trip_id)
        if trip is None:
            raise NotFoundError(f"Trip {trip_id} not found")
        return trip
