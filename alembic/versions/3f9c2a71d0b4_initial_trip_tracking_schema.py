"""initial_trip_tracking_schema

Revision ID: 3f9c2a71d0b4
Revises:
Create Date: 2025-11-03 09:12:40

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f9c2a71d0b4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


NON_TERMINAL_TRIP = "status IN ('IN_PROGRESS', 'PAUSED', 'STARTED')"
OPEN_SHIFT = "status IN ('ACTIVE', 'EMERGENCY')"

_pk = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    """
    Create the trip tracking tables.

    routes / route_points / vehicles / drivers mirror the collaborators the
    service reads; trips / trip_stops / vehicle_locations / driver_shifts are
    owned by the service.

    The partial unique indexes enforce at most one non-terminal trip per
    driver and per vehicle, and at most one open shift per driver.
    """
    print("[MIGRATION] Creating trip tracking schema...")

    # ========================================
    # COLLABORATORS
    # ========================================
    op.create_table(
        "routes",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("tenant_id", sa.String(36), nullable=True),
        sa.Column("code", sa.String(50), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_routes"),
    )
    op.create_index("ix_routes_tenant_id", "routes", ["tenant_id"])

    op.create_table(
        "route_points",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("route_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_route_points"),
        sa.ForeignKeyConstraint(
            ["route_id"], ["routes.id"],
            name="fk_route_points_route_id_routes", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("route_id", "order", name="uq_route_points_route_order"),
        sa.CheckConstraint("latitude >= -90 AND latitude <= 90", name="ck_route_points_check_lat_range"),
        sa.CheckConstraint("longitude >= -180 AND longitude <= 180", name="ck_route_points_check_lon_range"),
    )
    op.create_index("ix_route_points_route_id", "route_points", ["route_id"])
    op.create_index("idx_route_points_route_order", "route_points", ["route_id", "order"])

    op.create_table(
        "vehicles",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("tenant_id", sa.String(36), nullable=True),
        sa.Column("plate_number", sa.String(20), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("current_driver_id", sa.String(36), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_vehicles"),
        sa.UniqueConstraint("plate_number", name="uq_vehicles_plate_number"),
        sa.CheckConstraint("capacity IS NULL OR capacity >= 0", name="ck_vehicles_check_capacity"),
    )
    op.create_index("ix_vehicles_tenant_id", "vehicles", ["tenant_id"])

    op.create_table(
        "drivers",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("tenant_id", sa.String(36), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(200), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_drivers"),
    )
    op.create_index("ix_drivers_tenant_id", "drivers", ["tenant_id"])

    # ========================================
    # TRIPS
    # ========================================
    op.create_table(
        "trips",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("route_id", sa.String(36), nullable=False),
        sa.Column("vehicle_id", sa.String(36), nullable=False),
        sa.Column("driver_id", sa.String(36), nullable=False),
        sa.Column("scheduled_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("scheduled_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("actual_start", sa.DateTime(timezone=True), nullable=True),
        sa.Column("actual_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("max_capacity", sa.Integer(), nullable=False),
        sa.Column("passenger_count", sa.Integer(), nullable=False),
        sa.Column("current_stop_index", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_trips"),
        sa.ForeignKeyConstraint(["route_id"], ["routes.id"], name="fk_trips_route_id_routes"),
        sa.ForeignKeyConstraint(["vehicle_id"], ["vehicles.id"], name="fk_trips_vehicle_id_vehicles"),
        sa.ForeignKeyConstraint(["driver_id"], ["drivers.id"], name="fk_trips_driver_id_drivers"),
        sa.CheckConstraint("passenger_count >= 0", name="ck_trips_check_passenger_count"),
        sa.CheckConstraint("current_stop_index >= 0", name="ck_trips_check_current_stop_index"),
        sa.CheckConstraint("max_capacity >= 0", name="ck_trips_check_max_capacity"),
        sa.CheckConstraint(
            "actual_end IS NULL OR actual_start IS NULL OR actual_end >= actual_start",
            name="ck_trips_check_time_order"
        ),
    )
    op.create_index("ix_trips_route_id", "trips", ["route_id"])
    op.create_index("ix_trips_vehicle_id", "trips", ["vehicle_id"])
    op.create_index("ix_trips_driver_id", "trips", ["driver_id"])
    op.create_index("idx_trips_status_scheduled_start", "trips", ["status", "scheduled_start"])
    op.create_index(
        "uq_trips_driver_active", "trips", ["driver_id"],
        unique=True,
        postgresql_where=sa.text(NON_TERMINAL_TRIP),
        sqlite_where=sa.text(NON_TERMINAL_TRIP),
    )
    op.create_index(
        "uq_trips_vehicle_active", "trips", ["vehicle_id"],
        unique=True,
        postgresql_where=sa.text(NON_TERMINAL_TRIP),
        sqlite_where=sa.text(NON_TERMINAL_TRIP),
    )

    op.create_table(
        "trip_stops",
        sa.Column("id", _pk, autoincrement=True, nullable=False),
        sa.Column("trip_id", sa.String(36), nullable=False),
        sa.Column("route_point_id", sa.String(36), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("arrived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("departed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("delay", sa.Integer(), nullable=False),
        sa.Column("passengers_boarded", sa.Integer(), nullable=False),
        sa.Column("passengers_alighted", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_trip_stops"),
        sa.ForeignKeyConstraint(
            ["trip_id"], ["trips.id"],
            name="fk_trip_stops_trip_id_trips", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["route_point_id"], ["route_points.id"],
            name="fk_trip_stops_route_point_id_route_points"
        ),
        sa.UniqueConstraint("trip_id", "route_point_id", name="uq_trip_stops_trip_route_point"),
        sa.CheckConstraint("passengers_boarded >= 0", name="ck_trip_stops_check_boarded"),
        sa.CheckConstraint("passengers_alighted >= 0", name="ck_trip_stops_check_alighted"),
    )
    op.create_index("ix_trip_stops_trip_id", "trip_stops", ["trip_id"])

    # ========================================
    # LOCATION SAMPLES
    # ========================================
    op.create_table(
        "vehicle_locations",
        sa.Column("id", _pk, autoincrement=True, nullable=False),
        sa.Column("trip_id", sa.String(36), nullable=False),
        sa.Column("vehicle_id", sa.String(36), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("speed", sa.Float(), nullable=True),
        sa.Column("heading", sa.Float(), nullable=True),
        sa.Column("accuracy", sa.Float(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_vehicle_locations"),
        sa.ForeignKeyConstraint(
            ["trip_id"], ["trips.id"],
            name="fk_vehicle_locations_trip_id_trips", ondelete="CASCADE"
        ),
        sa.CheckConstraint("latitude >= -90 AND latitude <= 90", name="ck_vehicle_locations_check_lat_range"),
        sa.CheckConstraint("longitude >= -180 AND longitude <= 180", name="ck_vehicle_locations_check_lon_range"),
    )
    op.create_index(
        "idx_vehicle_locations_trip_timestamp", "vehicle_locations",
        ["trip_id", sa.text("timestamp DESC")]
    )
    op.create_index(
        "idx_vehicle_locations_vehicle_timestamp", "vehicle_locations",
        ["vehicle_id", sa.text("timestamp DESC")]
    )

    # ========================================
    # DRIVER SHIFTS
    # ========================================
    op.create_table(
        "driver_shifts",
        sa.Column("id", _pk, autoincrement=True, nullable=False),
        sa.Column("driver_id", sa.String(36), nullable=False),
        sa.Column("vehicle_id", sa.String(36), nullable=False),
        sa.Column("trip_id", sa.String(36), nullable=False),
        sa.Column("check_in_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("check_out_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("location", sa.String(200), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_driver_shifts"),
        sa.ForeignKeyConstraint(["driver_id"], ["drivers.id"], name="fk_driver_shifts_driver_id_drivers"),
        sa.ForeignKeyConstraint(["vehicle_id"], ["vehicles.id"], name="fk_driver_shifts_vehicle_id_vehicles"),
        sa.ForeignKeyConstraint(
            ["trip_id"], ["trips.id"],
            name="fk_driver_shifts_trip_id_trips", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("trip_id", name="uq_driver_shifts_trip_id"),
    )
    op.create_index("ix_driver_shifts_driver_id", "driver_shifts", ["driver_id"])
    op.create_index(
        "uq_driver_shifts_driver_open", "driver_shifts", ["driver_id"],
        unique=True,
        postgresql_where=sa.text(OPEN_SHIFT),
        sqlite_where=sa.text(OPEN_SHIFT),
    )

    print("[MIGRATION] ✅ Trip tracking schema created")


def downgrade() -> None:
    """
    Drop the trip tracking tables (children first).
    """
    print("[MIGRATION] Dropping trip tracking schema...")

    op.drop_table("driver_shifts")
    op.drop_table("vehicle_locations")
    op.drop_table("trip_stops")
    op.drop_table("trips")
    op.drop_table("drivers")
    op.drop_table("vehicles")
    op.drop_table("route_points")
    op.drop_table("routes")

    print("[MIGRATION] ❌ Trip tracking schema removed")
