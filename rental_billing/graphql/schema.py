"""Strawberry GraphQL schema definition."""
from __future__ import annotations

from collections.abc import Callable
from contextlib import contextmanager
from datetime import datetime
from typing import TypeVar

import strawberry
from graphql import GraphQLError
from strawberry.types import Info

from rental_billing.graphql.context import GraphQLContext
from rental_billing.schemas.invoice import (
    GenerateInvoiceRequest,
    InvoiceRead,
    MonthlyInvoiceRequest,
    OwnerEndReading,
    OwnerInvoiceGroup,
    TripEndReading,
)
from rental_billing.services.exceptions import ServiceError
from rental_billing.services.invoice_service import InvoiceService


ResultType = TypeVar("ResultType")


@contextmanager
def _session_scope(context: GraphQLContext):
    session = context.get_session()
    try:
        yield session
    finally:
        session.close()


def _execute_with_invoices(
    info: Info[GraphQLContext, None],
    executor: Callable[[InvoiceService], ResultType],
) -> ResultType:
    with _session_scope(info.context) as session:
        service = InvoiceService(session)
        try:
            return executor(service)
        except ServiceError as exc:
            raise GraphQLError(str(exc)) from exc


@strawberry.type
class HealthCheck:
    """Simple health payload for schema bootstrap."""

    status: str


@strawberry.type
class InvoiceType:
    id: strawberry.ID
    owner_id: strawberry.ID
    trip_id: strawberry.ID
    car_id: strawberry.ID
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


@strawberry.type
class OwnerType:
    id: strawberry.ID
    name: str
    email: str


@strawberry.type
class ModelInvoicesType:
    model: str
    invoices: list[InvoiceType]


@strawberry.type
class OwnerInvoicesType:
    owner: OwnerType
    models: list[ModelInvoicesType]


@strawberry.input
class TripEndReadingInput:
    trip_id: strawberry.ID
    km: float
    date: datetime | None = None


@strawberry.input
class OwnerEndReadingInput:
    email: str
    km: float


def _to_invoice_type(invoice: InvoiceRead) -> InvoiceType:
    return InvoiceType(
        id=invoice.id,
        owner_id=invoice.owner_id,
        trip_id=invoice.trip_id,
        car_id=invoice.car_id,
        model=invoice.model,
        day_qty=invoice.day_qty,
        day_rate=invoice.day_rate,
        day_amount=invoice.day_amount,
        km_qty=invoice.km_qty,
        km_rate=invoice.km_rate,
        km_amount=invoice.km_amount,
        total_amount=invoice.total_amount,
        offroad=invoice.offroad,
        invoice_date=invoice.invoice_date,
    )


def _to_owner_invoices(group: OwnerInvoiceGroup) -> OwnerInvoicesType:
    return OwnerInvoicesType(
        owner=OwnerType(id=group.owner.id, name=group.owner.name, email=group.owner.email),
        models=[
            ModelInvoicesType(model=item.model, invoices=[_to_invoice_type(row) for row in item.invoices])
            for item in group.models
        ],
    )


@strawberry.type
class Query:
    """Root GraphQL query type."""

    @strawberry.field(description="Basic service liveness check")
    def health(self) -> HealthCheck:
        return HealthCheck(status="ok")

    @strawberry.field(description="Invoices nested by owner and car model")
    def invoice_report(self, info: Info[GraphQLContext, None]) -> list[OwnerInvoicesType]:
        groups = _execute_with_invoices(info, lambda service: service.list_grouped())
        return [_to_owner_invoices(group) for group in groups]


@strawberry.type
class Mutation:
    """Root GraphQL mutation type."""

    @strawberry.mutation(description="Close the current period of every ongoing trip on a car")
    def generate_invoices(
        self,
        info: Info[GraphQLContext, None],
        registration_no: str,
        continue_trip: bool,
        readings: list[TripEndReadingInput],
    ) -> list[InvoiceType]:
        request = GenerateInvoiceRequest(
            registration_no=registration_no,
            continue_trip=continue_trip,
            readings=[
                TripEndReading(trip_id=str(reading.trip_id), km=reading.km, date=reading.date)
                for reading in readings
            ],
        )
        rows = _execute_with_invoices(info, lambda service: service.generate_for_car(request))
        return [_to_invoice_type(row) for row in rows]

    @strawberry.mutation(description="Invoice every ongoing trip not yet billed this month")
    def generate_monthly_invoices(
        self,
        info: Info[GraphQLContext, None],
        readings: list[OwnerEndReadingInput],
    ) -> list[InvoiceType]:
        request = MonthlyInvoiceRequest(
            readings=[OwnerEndReading(email=reading.email, km=reading.km) for reading in readings]
        )
        rows = _execute_with_invoices(info, lambda service: service.generate_for_month(request))
        return [_to_invoice_type(row) for row in rows]


schema = strawberry.Schema(query=Query, mutation=Mutation)
