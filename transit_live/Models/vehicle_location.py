# transit_live/Models/vehicle_location.py
from sqlalchemy.orm import declared_attr
from sqlalchemy import Column, BigInteger, Integer, String, Float, ForeignKey, CheckConstraint, Index
from transit_live.DB.base_class import Base
from transit_live.DB.types import UTCDateTime


class VehicleLocation(Base):
    """
    SQLAlchemy model for a single GPS sample of a vehicle on a trip.

    Append-only: rows are never updated or deleted by the service. The
    "latest location" of a trip or vehicle is the row with the greatest
    ``timestamp``.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "vehicle_locations"

    # Primary key
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    trip_id = Column(
        String(36),
        ForeignKey("trips.id", ondelete="CASCADE"),
        nullable=False,
        doc="Trip this sample belongs to"
    )

    vehicle_id = Column(
        String(36),
        nullable=False,
        doc="Vehicle that reported the sample"
    )

    # GPS fields
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    speed = Column(Float, nullable=True, doc="km/h as reported by the device")
    heading = Column(Float, nullable=True, doc="Degrees clockwise from north")
    accuracy = Column(Float, nullable=True, doc="Horizontal accuracy in meters")

    # Capture time (timezone-aware UTC)
    timestamp = Column(UTCDateTime, nullable=False)

    __table_args__ = (
        Index("idx_vehicle_locations_trip_timestamp", "trip_id", timestamp.desc()),
        Index("idx_vehicle_locations_vehicle_timestamp", "vehicle_id", timestamp.desc()),
        CheckConstraint("latitude >= -90 AND latitude <= 90", name="check_lat_range"),
        CheckConstraint("longitude >= -180 AND longitude <= 180", name="check_lon_range"),
    )

    def __repr__(self) -> str:
        return (
            f"<VehicleLocation(id={self.id}, vehicle_id={self.vehicle_id!r}, "
            f"Lat={self.latitude:.5f}, Lon={self.longitude:.5f}, trip_id={self.trip_id!r})>"
        )
