"""ORM model definitions for the rental billing domain."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, utcnow

DELETE_CASCADE = "all, delete-orphan"

UUID_STR = String(36)
MONEY = Numeric(18, 2)
ODOMETER = Numeric(12, 2)


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class TripStatus(str, Enum):
    """Lifecycle state for trips."""

    ONGOING = "ongoing"
    COMPLETED = "completed"


class Owner(Base, TimestampMixin):
    """Owner of one or more rental cars, identified by email."""

    id: Mapped[str] = mapped_column(UUID_STR, primary_key=True, default=lambda: str(uuid4()))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)

    cars: Mapped[list["Car"]] = relationship("Car", back_populates="owner", cascade=DELETE_CASCADE)
    invoices: Mapped[list["Invoice"]] = relationship("Invoice", back_populates="owner")


class Car(Base, TimestampMixin):
    """Rental car with its day and distance tariff."""

    id: Mapped[str] = mapped_column(UUID_STR, primary_key=True, default=lambda: str(uuid4()))
    owner_id: Mapped[str] = mapped_column(UUID_STR, ForeignKey("owner.id", ondelete="cascade"), nullable=False, index=True)
    registration_no: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    model: Mapped[str] = mapped_column(String(255), nullable=False)
    rate_per_day: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    rate_per_km: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    current_km: Mapped[Decimal] = mapped_column(ODOMETER, nullable=False, default=Decimal("0"))

    owner: Mapped[Owner] = relationship("Owner", back_populates="cars")
    trips: Mapped[list["Trip"]] = relationship("Trip", back_populates="car", cascade=DELETE_CASCADE)


class Trip(Base, TimestampMixin):
    """One rental of a car, bounded by start and end odometer readings."""

    id: Mapped[str] = mapped_column(UUID_STR, primary_key=True, default=lambda: str(uuid4()))
    car_id: Mapped[str] = mapped_column(UUID_STR, ForeignKey("car.id", ondelete="cascade"), nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    start_km: Mapped[Decimal] = mapped_column(ODOMETER, nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_km: Mapped[Decimal | None] = mapped_column(ODOMETER, nullable=True)
    offroad: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[TripStatus] = mapped_column(
        SQLEnum(TripStatus, name="trip_status", values_callable=_enum_values), default=TripStatus.ONGOING, nullable=False
    )

    car: Mapped[Car] = relationship("Car", back_populates="trips")
    generated: Mapped[list["BillingCycle"]] = relationship(
        "BillingCycle",
        back_populates="trip",
        cascade=DELETE_CASCADE,
        order_by="BillingCycle.generated_at",
    )
    invoices: Mapped[list["Invoice"]] = relationship("Invoice", back_populates="trip")

    __table_args__ = (
        Index("ix_trip_car_status", "car_id", "status"),
    )


class BillingCycle(Base):
    """Marker recording that a trip was invoiced for a calendar month."""

    id: Mapped[str] = mapped_column(UUID_STR, primary_key=True, default=lambda: str(uuid4()))
    trip_id: Mapped[str] = mapped_column(UUID_STR, ForeignKey("trip.id", ondelete="cascade"), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    trip: Mapped[Trip] = relationship("Trip", back_populates="generated")

    __table_args__ = (
        UniqueConstraint("trip_id", "year", "month", name="uq_billing_cycle_per_month"),
    )


class Invoice(Base, TimestampMixin):
    """Charges for one closed billing period of a trip. Never mutated after creation."""

    id: Mapped[str] = mapped_column(UUID_STR, primary_key=True, default=lambda: str(uuid4()))
    owner_id: Mapped[str] = mapped_column(UUID_STR, ForeignKey("owner.id", ondelete="cascade"), nullable=False)
    trip_id: Mapped[str] = mapped_column(UUID_STR, ForeignKey("trip.id", ondelete="cascade"), nullable=False)
    car_id: Mapped[str] = mapped_column(UUID_STR, ForeignKey("car.id", ondelete="cascade"), nullable=False)
    model: Mapped[str] = mapped_column(String(255), nullable=False)
    day_qty: Mapped[int] = mapped_column(Integer, nullable=False)
    day_rate: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    day_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    km_qty: Mapped[Decimal] = mapped_column(ODOMETER, nullable=False)
    km_rate: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    km_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    offroad: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    invoice_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    owner: Mapped[Owner] = relationship("Owner", back_populates="invoices")
    trip: Mapped[Trip] = relationship("Trip", back_populates="invoices")
    car: Mapped[Car] = relationship("Car")

    __table_args__ = (
        Index("ix_invoice_owner_model", "owner_id", "model"),
    )


__all__ = [
    "Owner",
    "Car",
    "Trip",
    "BillingCycle",
    "Invoice",
    "TripStatus",
]
