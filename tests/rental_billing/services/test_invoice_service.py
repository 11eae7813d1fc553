"""Unit tests for :mod:`rental_billing.services.invoice_service`."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select

from rental_billing.db.base import as_utc
from rental_billing.db.models import BillingCycle, Car, Invoice, Owner, Trip, TripStatus
from rental_billing.schemas.invoice import (
    GenerateInvoiceRequest,
    MonthlyInvoiceRequest,
    OwnerEndReading,
    TripEndReading,
)
from rental_billing.services import invoice_service
from rental_billing.services.exceptions import (
    ConflictError,
    MissingInputError,
    NotFoundError,
    ValidationError,
)
from rental_billing.services.invoice_service import InvoiceService

START = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
NOW = datetime(2024, 3, 11, 9, 0, tzinfo=timezone.utc)


def _service(session, now: datetime = NOW) -> InvoiceService:
    return InvoiceService(session, clock=lambda: now)


def _invoice_count(session) -> int:
    return session.scalar(select(func.count()).select_from(Invoice))


def _second_owner_car(session, email: str = "ravi@example.com", registration_no: str = "MH02CD5678") -> Car:
    other = Owner(name="Ravi", email=email)
    car = Car(
        owner=other,
        registration_no=registration_no,
        model="Innova",
        rate_per_day=Decimal("200.00"),
        rate_per_km=Decimal("5.00"),
        current_km=Decimal("5000"),
    )
    session.add_all([other, car])
    session.commit()
    session.refresh(car)
    return car


def test_generate_for_car_computes_charges_and_completes_trip(session, car, make_trip) -> None:
    trip = make_trip(car, start_km="1000", start_date=START, offroad=1)
    end_date = START + timedelta(days=5)

    result = _service(session).generate_for_car(
        GenerateInvoiceRequest(
            registration_no=car.registration_no,
            continue_trip=False,
            readings=[TripEndReading(trip_id=trip.id, km=1250, date=end_date)],
        )
    )

    assert len(result) == 1
    invoice = result[0]
    assert invoice.trip_id == trip.id
    assert invoice.car_id == car.id
    assert invoice.owner_id == car.owner_id
    assert invoice.model == "Swift"
    assert invoice.day_qty == 5
    assert invoice.day_amount == 400
    assert invoice.km_qty == 250
    assert invoice.km_amount == 2500
    assert invoice.total_amount == 2900
    assert invoice.offroad == 1

    session.refresh(trip)
    assert trip.status is TripStatus.COMPLETED
    assert trip.start_km == Decimal("1250")
    assert trip.end_km == Decimal("1250")
    assert as_utc(trip.end_date) == end_date


def test_generate_for_car_rolls_trip_over_when_continuing(session, car, make_trip) -> None:
    trip = make_trip(car, start_km="1000", start_date=START, offroad=2)
    end_date = START + timedelta(days=3)

    _service(session).generate_for_car(
        GenerateInvoiceRequest(
            registration_no=car.registration_no,
            continue_trip=True,
            readings=[TripEndReading(trip_id=trip.id, km=1100, date=end_date)],
        )
    )

    session.refresh(trip)
    assert trip.status is TripStatus.ONGOING
    assert as_utc(trip.start_date) == end_date
    assert trip.start_km == Decimal("1100")
    assert trip.end_date is None
    assert trip.end_km is None
    assert trip.offroad == 0


def test_generate_for_car_defaults_end_date_to_now(session, car, make_trip) -> None:
    trip = make_trip(car, start_date=START)

    result = _service(session).generate_for_car(
        GenerateInvoiceRequest(
            registration_no=car.registration_no,
            continue_trip=True,
            readings=[TripEndReading(trip_id=trip.id, km=1000)],
        )
    )

    assert result[0].day_qty == 10
    session.refresh(trip)
    assert as_utc(trip.start_date) == NOW


def test_generate_for_car_updates_car_odometer(session, car, make_trip) -> None:
    trip = make_trip(car, start_km="1000")

    _service(session).generate_for_car(
        GenerateInvoiceRequest(
            registration_no=car.registration_no,
            continue_trip=True,
            readings=[TripEndReading(trip_id=trip.id, km=1400.5)],
        )
    )

    session.refresh(car)
    assert car.current_km == Decimal("1400.50")


def test_generate_for_car_bills_every_ongoing_trip_and_skips_completed(session, car, make_trip) -> None:
    first = make_trip(car, start_km="1000")
    second = make_trip(car, start_km="2000")
    make_trip(car, start_km="500", status=TripStatus.COMPLETED)

    result = _service(session).generate_for_car(
        GenerateInvoiceRequest(
            registration_no=car.registration_no,
            continue_trip=True,
            readings=[
                TripEndReading(trip_id=first.id, km=1010),
                TripEndReading(trip_id=second.id, km=2020),
            ],
        )
    )

    assert {invoice.trip_id: invoice.km_qty for invoice in result} == {first.id: 10, second.id: 20}


def test_generate_for_car_unknown_car_raises_not_found(session) -> None:
    with pytest.raises(NotFoundError):
        _service(session).generate_for_car(
            GenerateInvoiceRequest(registration_no="NOPE", continue_trip=True, readings=[])
        )


def test_generate_for_car_missing_reading_raises(session, car, make_trip) -> None:
    make_trip(car)

    with pytest.raises(MissingInputError):
        _service(session).generate_for_car(
            GenerateInvoiceRequest(registration_no=car.registration_no, continue_trip=True, readings=[])
        )


def test_generate_for_car_rejects_reading_for_foreign_trip(session, car, make_trip) -> None:
    trip = make_trip(car)

    with pytest.raises(ValidationError):
        _service(session).generate_for_car(
            GenerateInvoiceRequest(
                registration_no=car.registration_no,
                continue_trip=True,
                readings=[
                    TripEndReading(trip_id=trip.id, km=1100),
                    TripEndReading(trip_id="someone-elses-trip", km=10),
                ],
            )
        )


def test_generate_for_car_rejects_repeated_reading_for_a_trip(session, car, make_trip) -> None:
    trip = make_trip(car)

    with pytest.raises(ValidationError, match=trip.id):
        _service(session).generate_for_car(
            GenerateInvoiceRequest(
                registration_no=car.registration_no,
                continue_trip=True,
                readings=[
                    TripEndReading(trip_id=trip.id, km=1100),
                    TripEndReading(trip_id=trip.id, km=1900),
                ],
            )
        )

    assert _invoice_count(session) == 0
    session.refresh(trip)
    assert trip.end_km is None


def test_generate_for_car_decreasing_odometer_rolls_back_all_trips(session, car, make_trip) -> None:
    good = make_trip(car, start_km="1000")
    bad = make_trip(car, start_km="3000")

    with pytest.raises(ValidationError):
        _service(session).generate_for_car(
            GenerateInvoiceRequest(
                registration_no=car.registration_no,
                continue_trip=False,
                readings=[
                    TripEndReading(trip_id=good.id, km=1100),
                    TripEndReading(trip_id=bad.id, km=2999),
                ],
            )
        )

    assert _invoice_count(session) == 0
    session.refresh(good)
    assert good.status is TripStatus.ONGOING
    assert good.end_km is None
    assert good.start_km == Decimal("1000")


def test_generate_for_trip_bills_single_trip(session, car, make_trip) -> None:
    trip = make_trip(car, start_km="1000", start_date=START)

    invoice = _service(session).generate_for_trip(
        trip.id,
        TripEndReading(trip_id=trip.id, km=1050, date=START + timedelta(hours=30)),
        continue_trip=False,
    )

    assert invoice.day_qty == 2
    assert invoice.km_qty == 50
    assert invoice.total_amount == invoice.day_amount + invoice.km_amount


def test_generate_for_trip_rejects_completed_trip(session, car, make_trip) -> None:
    trip = make_trip(car, status=TripStatus.COMPLETED)

    with pytest.raises(ConflictError):
        _service(session).generate_for_trip(trip.id, TripEndReading(trip_id=trip.id, km=1100), True)


def test_generate_for_trip_missing_trip_raises_not_found(session) -> None:
    with pytest.raises(NotFoundError):
        _service(session).generate_for_trip("missing", TripEndReading(trip_id="missing", km=1), True)


def test_generate_for_month_bills_due_trips_without_offroad(session, car, make_trip) -> None:
    trip = make_trip(car, start_km="1000", start_date=START, offroad=3)

    result = _service(session).generate_for_month(
        MonthlyInvoiceRequest(readings=[OwnerEndReading(email="asha@example.com", km=1200.5)])
    )

    assert len(result) == 1
    invoice = result[0]
    assert invoice.day_qty == 10
    assert invoice.day_amount == 1000
    assert invoice.km_qty == 200.5
    assert invoice.km_amount == 2005
    assert invoice.total_amount == 3005
    assert invoice.offroad == 0

    session.refresh(trip)
    session.refresh(car)
    assert trip.status is TripStatus.ONGOING
    assert trip.start_km == Decimal("1000")
    assert trip.end_km == Decimal("1200.50")
    assert as_utc(trip.end_date) == NOW
    assert car.current_km == Decimal("1200.50")
    assert [(cycle.year, cycle.month) for cycle in trip.generated] == [(2024, 3)]


def test_generate_for_month_stores_amounts_that_add_up(session, car, make_trip) -> None:
    car.rate_per_day = Decimal("100.01")
    car.rate_per_km = Decimal("0.33")
    session.commit()
    make_trip(car, start_km="1000", start_date=START)

    _service(session).generate_for_month(
        MonthlyInvoiceRequest(readings=[OwnerEndReading(email="asha@example.com", km=1250.555)])
    )

    session.expire_all()
    stored = session.scalars(select(Invoice)).one()
    assert stored.km_qty == Decimal("250.56")
    assert stored.km_amount == (stored.km_qty * stored.km_rate).quantize(Decimal("0.01"))
    assert stored.day_amount == Decimal("1000.10")
    assert stored.total_amount == stored.day_amount + stored.km_amount
    assert stored.total_amount == Decimal("1082.78")


def test_generate_for_month_skips_trips_already_billed_this_month(session, car, make_trip) -> None:
    make_trip(car)
    service = _service(session)
    request = MonthlyInvoiceRequest(readings=[OwnerEndReading(email="asha@example.com", km=1100)])

    service.generate_for_month(request)

    with pytest.raises(NotFoundError):
        service.generate_for_month(request)

    next_month = _service(session, now=datetime(2024, 4, 1, 9, 0, tzinfo=timezone.utc))
    assert len(next_month.generate_for_month(request)) == 1


def test_generate_for_month_same_month_other_year_is_due(session, car, make_trip) -> None:
    trip = make_trip(car, start_date=datetime(2023, 3, 1, tzinfo=timezone.utc))
    session.add(BillingCycle(trip_id=trip.id, year=2023, month=3))
    session.commit()

    result = _service(session).generate_for_month(
        MonthlyInvoiceRequest(readings=[OwnerEndReading(email="asha@example.com", km=1100)])
    )

    assert [invoice.trip_id for invoice in result] == [trip.id]


def test_generate_for_month_requires_reading_for_every_owner(session, car, make_trip) -> None:
    make_trip(car)
    other_car = _second_owner_car(session)
    make_trip(other_car, start_km="5000")

    with pytest.raises(MissingInputError) as exc_info:
        _service(session).generate_for_month(
            MonthlyInvoiceRequest(readings=[OwnerEndReading(email="asha@example.com", km=1100)])
        )

    assert "ravi@example.com" in str(exc_info.value)
    assert _invoice_count(session) == 0
    assert session.scalar(select(func.count()).select_from(BillingCycle)) == 0


def test_generate_for_month_empty_readings_raise_missing_input(session, car, make_trip) -> None:
    make_trip(car)

    with pytest.raises(MissingInputError):
        _service(session).generate_for_month(MonthlyInvoiceRequest(readings=[]))


def test_generate_for_month_without_due_trips_raises_not_found(session, car) -> None:
    with pytest.raises(NotFoundError):
        _service(session).generate_for_month(
            MonthlyInvoiceRequest(readings=[OwnerEndReading(email="asha@example.com", km=1)])
        )


def test_generate_for_month_failure_leaves_nothing_billed(session, car, make_trip) -> None:
    make_trip(car, start_km="1000")
    other_car = _second_owner_car(session)
    make_trip(other_car, start_km="5000")

    with pytest.raises(ValidationError):
        _service(session).generate_for_month(
            MonthlyInvoiceRequest(
                readings=[
                    OwnerEndReading(email="asha@example.com", km=1100),
                    OwnerEndReading(email="ravi@example.com", km=4000),
                ]
            )
        )

    assert _invoice_count(session) == 0
    assert session.scalar(select(func.count()).select_from(BillingCycle)) == 0
    session.refresh(car)
    assert car.current_km == Decimal("1000")


def test_list_grouped_nests_by_owner_then_model(session, car, make_trip) -> None:
    other_car = _second_owner_car(session)
    swift_trip = make_trip(car, start_km="1000")
    innova_trip = make_trip(other_car, start_km="5000")

    service = _service(session)
    service.generate_for_month(
        MonthlyInvoiceRequest(
            readings=[
                OwnerEndReading(email="asha@example.com", km=1100),
                OwnerEndReading(email="ravi@example.com", km=5100),
            ]
        )
    )

    groups = service.list_grouped()

    assert {group.owner.email for group in groups} == {"asha@example.com", "ravi@example.com"}
    by_email = {group.owner.email: group for group in groups}
    assert [item.model for item in by_email["asha@example.com"].models] == ["Swift"]
    assert [item.model for item in by_email["ravi@example.com"].models] == ["Innova"]
    assert by_email["asha@example.com"].models[0].invoices[0].trip_id == swift_trip.id
    assert by_email["ravi@example.com"].models[0].invoices[0].trip_id == innova_trip.id


def test_list_grouped_without_invoices_raises_not_found(session) -> None:
    with pytest.raises(NotFoundError):
        _service(session).list_grouped()


def test_generate_for_car_logs_and_uses_repositories(monkeypatch: pytest.MonkeyPatch) -> None:
    session = MagicMock()

    class EmptyCarRepository:
        def __init__(self, bound_session: MagicMock) -> None:
            self.session = bound_session
            self.requested: list[str] = []

        def get_by_registration(self, registration_no: str) -> None:
            self.requested.append(registration_no)
            return None

    repository = EmptyCarRepository(session)
    monkeypatch.setattr(invoice_service, "CarRepository", lambda _session: repository)

    service = InvoiceService(session)

    with pytest.raises(NotFoundError):
        service.generate_for_car(
            GenerateInvoiceRequest(registration_no="ka01", continue_trip=True, readings=[])
        )

    assert repository.requested == ["KA01"]
    session.commit.assert_not_called()
