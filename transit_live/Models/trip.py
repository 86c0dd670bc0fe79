# transit_live/Models/trip.py
from sqlalchemy import Column, String, Integer, Text, ForeignKey, CheckConstraint, Index, Enum, text
from sqlalchemy.orm import declared_attr, relationship
from transit_live.DB.base_class import Base
from transit_live.DB.types import UTCDateTime
from transit_live.Models.trip_enums import TripStatus, NON_TERMINAL_TRIP_STATUSES, sql_in


_NON_TERMINAL = text(f"status IN {sql_in(NON_TERMINAL_TRIP_STATUSES)}")


class Trip(Base):
    """
    SQLAlchemy model for one vehicle's execution of one route.

    Responsibilities:
    - Tracks lifecycle status (STARTED → IN_PROGRESS ⇄ PAUSED → COMPLETED/CANCELLED)
    - Holds the live counters: passengers aboard and current stop index
    - Snapshots vehicle capacity at start (never re-read afterwards)

    Related models:
    - Route / Vehicle / Driver (N:1)
    - TripStop (1:N) - full stop schedule created together with the trip
    - VehicleLocation (1:N) - GPS samples ingested while the trip is moving

    Exclusivity:
    Partial unique indexes on driver_id and vehicle_id, restricted to
    non-terminal statuses, make "one active trip per driver / per vehicle"
    a database invariant as well as a service check.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "trips"

    # ========================================
    # PRIMARY KEY
    # ========================================
    id = Column(String(36), primary_key=True)

    # ========================================
    # FOREIGN KEYS
    # ========================================
    route_id = Column(String(36), ForeignKey("routes.id"), nullable=False, index=True)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    driver_id = Column(String(36), ForeignKey("drivers.id"), nullable=False, index=True)

    # ========================================
    # SCHEDULE
    # ========================================
    scheduled_start = Column(UTCDateTime, nullable=False)
    scheduled_end = Column(UTCDateTime, nullable=False)
    actual_start = Column(UTCDateTime, nullable=True)
    actual_end = Column(UTCDateTime, nullable=True, doc="Set on completion or cancellation")

    # ========================================
    # LIFECYCLE
    # ========================================
    status = Column(
        Enum(TripStatus, native_enum=False, length=20, validate_strings=True),
        nullable=False,
        default=TripStatus.STARTED,
    )

    notes = Column(Text, nullable=True, doc="Pause / abort reason or driver notes")

    # ========================================
    # LIVE COUNTERS
    # ========================================
    max_capacity = Column(
        Integer,
        nullable=False,
        doc="Capacity snapshotted from the vehicle (or override) at start"
    )

    passenger_count = Column(Integer, nullable=False, default=0)

    current_stop_index = Column(
        Integer,
        nullable=False,
        default=0,
        doc="0-based position in the ordered stop schedule; never decreases"
    )

    # ========================================
    # AUDIT FIELDS
    # ========================================
    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=True)

    # ========================================
    # RELATIONSHIPS
    # ========================================
    route = relationship("Route")
    vehicle = relationship("Vehicle")
    driver = relationship("Driver")

    stops = relationship(
        "TripStop",
        back_populates="trip",
        order_by="TripStop.order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    # ========================================
    # TABLE CONSTRAINTS
    # ========================================
    __table_args__ = (
        Index("idx_trips_status_scheduled_start", "status", "scheduled_start"),
        Index(
            "uq_trips_driver_active", "driver_id",
            unique=True,
            postgresql_where=_NON_TERMINAL,
            sqlite_where=_NON_TERMINAL,
        ),
        Index(
            "uq_trips_vehicle_active", "vehicle_id",
            unique=True,
            postgresql_where=_NON_TERMINAL,
            sqlite_where=_NON_TERMINAL,
        ),
        CheckConstraint("passenger_count >= 0", name="check_passenger_count"),
        CheckConstraint("current_stop_index >= 0", name="check_current_stop_index"),
        CheckConstraint("max_capacity >= 0", name="check_max_capacity"),
        CheckConstraint(
            "actual_end IS NULL OR actual_start IS NULL OR actual_end >= actual_start",
            name="check_time_order"
        ),
    )

    @property
    def over_capacity(self) -> bool:
        return self.passenger_count > self.max_capacity

    def __repr__(self) -> str:
        return (
            f"<Trip(id={self.id!r}, vehicle_id={self.vehicle_id!r}, "
            f"driver_id={self.driver_id!r}, status={self.status!r})>"
        )
