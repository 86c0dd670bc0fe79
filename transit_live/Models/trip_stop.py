# transit_live/Models/trip_stop.py
from sqlalchemy import Column, BigInteger, Integer, String, ForeignKey, CheckConstraint, UniqueConstraint, Enum
from sqlalchemy.orm import declared_attr, relationship
from transit_live.DB.base_class import Base
from transit_live.DB.types import UTCDateTime
from transit_live.Models.trip_enums import StopStatus


class TripStop(Base):
    """
    One planned visit to one route point during one trip.

    All entries of a trip are created together with the trip. Each entry is
    mutated at most twice (arrival, then departure) or once (skip on
    completion / cancellation).
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "trip_stops"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    trip_id = Column(
        String(36),
        ForeignKey("trips.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    route_point_id = Column(String(36), ForeignKey("route_points.id"), nullable=False)

    order = Column(Integer, nullable=False, doc="Route order, fixed at creation")

    scheduled_at = Column(UTCDateTime, nullable=False)
    arrived_at = Column(UTCDateTime, nullable=True)
    departed_at = Column(UTCDateTime, nullable=True)

    status = Column(
        Enum(StopStatus, native_enum=False, length=20, validate_strings=True),
        nullable=False,
        default=StopStatus.PENDING,
    )

    delay = Column(
        Integer,
        nullable=False,
        default=0,
        doc="Signed minutes between scheduled and actual arrival (positive = late)"
    )

    passengers_boarded = Column(Integer, nullable=False, default=0)
    passengers_alighted = Column(Integer, nullable=False, default=0)

    trip = relationship("Trip", back_populates="stops")
    route_point = relationship("RoutePoint", lazy="joined")

    __table_args__ = (
        UniqueConstraint("trip_id", "route_point_id", name="uq_trip_stops_trip_route_point"),
        CheckConstraint("passengers_boarded >= 0", name="check_boarded"),
        CheckConstraint("passengers_alighted >= 0", name="check_alighted"),
    )

    def __repr__(self) -> str:
        return (
            f"<TripStop(trip_id={self.trip_id!r}, route_point_id={self.route_point_id!r}, "
            f"order={self.order}, status={self.status!r})>"
        )
