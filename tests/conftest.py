"""Shared pytest fixtures for rental billing tests."""
from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rental_billing.core.database import get_db_session
from rental_billing.db.base import Base
from rental_billing.db.models import Car, Owner, Trip, TripStatus
from rental_billing import main as app_main

TRIP_START = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture()
def engine() -> Generator:
    engine = create_engine(
        "sqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session(engine) -> Generator[Session, None, None]:
    SessionLocal = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False)
    db_session = SessionLocal()
    try:
        yield db_session
    finally:
        db_session.close()


@pytest.fixture()
def owner(session: Session) -> Owner:
    owner = Owner(name="Asha Rao", email="asha@example.com")
    session.add(owner)
    session.commit()
    session.refresh(owner)
    return owner


@pytest.fixture()
def car(session: Session, owner: Owner) -> Car:
    car = Car(
        owner_id=owner.id,
        registration_no="KA01AB1234",
        model="Swift",
        rate_per_day=Decimal("100.00"),
        rate_per_km=Decimal("10.00"),
        current_km=Decimal("1000"),
    )
    session.add(car)
    session.commit()
    session.refresh(car)
    return car


@pytest.fixture()
def make_trip(session: Session) -> Callable[..., Trip]:
    def _make_trip(
        car: Car,
        start_km: str = "1000",
        start_date: datetime = TRIP_START,
        offroad: int = 0,
        status: TripStatus = TripStatus.ONGOING,
    ) -> Trip:
        trip = Trip(
            car_id=car.id,
            start_km=Decimal(start_km),
            start_date=start_date,
            offroad=offroad,
            status=status,
        )
        session.add(trip)
        session.commit()
        session.refresh(trip)
        return trip

    return _make_trip


@pytest.fixture()
def client(session: Session, monkeypatch: pytest.MonkeyPatch) -> Generator[TestClient, None, None]:
    monkeypatch.setattr(app_main, "_run_migrations", lambda: None)
    application = app_main.create_app()

    def override_get_db_session() -> Generator[Session, None, None]:
        try:
            yield session
        finally:
            session.rollback()

    application.dependency_overrides[get_db_session] = override_get_db_session

    with TestClient(application) as test_client:
        yield test_client

    application.dependency_overrides.clear()
