"""Initial schema for the rental billing domain.

Revision ID: 0001_initial_schema
Revises: 
Create Date: 2026-10-18
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None

trip_status_enum = sa.Enum("ongoing", "completed", name="trip_status")
OWNER_PK = "owner.id"
CAR_PK = "car.id"
TRIP_PK = "trip.id"

def upgrade() -> None:
    bind = op.get_bind()
    trip_status_enum.create(bind, checkfirst=True)

    op.create_table(
        "owner",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "car",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("owner_id", sa.String(length=36), nullable=False),
        sa.Column("registration_no", sa.String(length=32), nullable=False, unique=True),
        sa.Column("model", sa.String(length=255), nullable=False),
        sa.Column("rate_per_day", sa.Numeric(18, 2), nullable=False),
        sa.Column("rate_per_km", sa.Numeric(18, 2), nullable=False),
        sa.Column("current_km", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["owner_id"], [OWNER_PK], ondelete="CASCADE"),
    )

    op.create_table(
        "trip",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("car_id", sa.String(length=36), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("start_km", sa.Numeric(12, 2), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_km", sa.Numeric(12, 2), nullable=True),
        sa.Column("offroad", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", trip_status_enum, nullable=False, server_default="ongoing"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["car_id"], [CAR_PK], ondelete="CASCADE"),
    )

    op.create_table(
        "billingcycle",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("trip_id", sa.String(length=36), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["trip_id"], [TRIP_PK], ondelete="CASCADE"),
        sa.UniqueConstraint("trip_id", "year", "month", name="uq_billing_cycle_per_month"),
    )

    op.create_table(
        "invoice",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("owner_id", sa.String(length=36), nullable=False),
        sa.Column("trip_id", sa.String(length=36), nullable=False),
        sa.Column("car_id", sa.String(length=36), nullable=False),
        sa.Column("model", sa.String(length=255), nullable=False),
        sa.Column("day_qty", sa.Integer(), nullable=False),
        sa.Column("day_rate", sa.Numeric(18, 2), nullable=False),
        sa.Column("day_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("km_qty", sa.Numeric(12, 2), nullable=False),
        sa.Column("km_rate", sa.Numeric(18, 2), nullable=False),
        sa.Column("km_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("offroad", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("invoice_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["owner_id"], [OWNER_PK], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["trip_id"], [TRIP_PK], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["car_id"], [CAR_PK], ondelete="CASCADE"),
    )

    op.create_index("ix_car_owner_id", "car", ["owner_id"])
    op.create_index("ix_trip_car_status", "trip", ["car_id", "status"])
    op.create_index("ix_invoice_owner_model", "invoice", ["owner_id", "model"])

def downgrade() -> None:
    op.drop_index("ix_invoice_owner_model", table_name="invoice")
    op.drop_index("ix_trip_car_status", table_name="trip")
    op.drop_index("ix_car_owner_id", table_name="car")

    op.drop_table("invoice")
    op.drop_table("billingcycle")
    op.drop_table("trip")
    op.drop_table("car")
    op.drop_table("owner")

    bind = op.get_bind()
    trip_status_enum.drop(bind, checkfirst=True)
