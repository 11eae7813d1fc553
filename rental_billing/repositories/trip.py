"""Repository for trip entities and their billing-cycle markers."""
from __future__ import annotations

from sqlalchemy import Select, exists, select
from sqlalchemy.orm import joinedload

from rental_billing.db.models import BillingCycle, Car, Trip, TripStatus

from .base import Repository


class TripRepository(Repository[Trip]):
    """Trip repository with billing-oriented queries."""

    model = Trip

    def get_with_car(self, trip_id: str) -> Trip | None:
        statement = (
            self._base_query()
            .options(joinedload(self.model.car).joinedload(Car.owner))
            .where(self.model.id == trip_id)
        )
        return self.session.scalar(statement)

    def list_ongoing_for_car(self, car_id: str) -> list[Trip]:
        statement: Select[tuple[Trip]] = (
            self._base_query()
            .options(joinedload(self.model.car))
            .where(self.model.car_id == car_id)
            .where(self.model.status == TripStatus.ONGOING)
        )
        return list(self.session.scalars(statement).all())

    def list_due_for_month(self, year: int, month: int) -> list[Trip]:
        """Ongoing trips without a billing-cycle marker for the given month, joined to car and owner."""

        already_billed = exists(
            select(BillingCycle.id)
            .where(BillingCycle.trip_id == self.model.id)
            .where(BillingCycle.year == year)
            .where(BillingCycle.month == month)
        )
        statement: Select[tuple[Trip]] = (
            self._base_query()
            .join(self.model.car)
            .options(joinedload(self.model.car).joinedload(Car.owner))
            .where(self.model.status == TripStatus.ONGOING)
            .where(~already_billed)
        )
        return list(self.session.scalars(statement).unique().all())

    def mark_generated(self, trip: Trip, year: int, month: int) -> BillingCycle:
        marker = BillingCycle(trip=trip, year=year, month=month)
        self.session.add(marker)
        return marker
