# transit_live/Models/driver_shift.py
from sqlalchemy import Column, BigInteger, Integer, String, Text, ForeignKey, Index, Enum, text
from sqlalchemy.orm import declared_attr
from transit_live.DB.base_class import Base
from transit_live.DB.types import UTCDateTime
from transit_live.Models.trip_enums import ShiftStatus, OPEN_SHIFT_STATUSES, sql_in


_OPEN = text(f"status IN {sql_in(OPEN_SHIFT_STATUSES)}")


class DriverShift(Base):
    """
    A driver's on-duty period, coupled 1:1 with a trip's active lifetime.

    The shift status is derived from the trip status and is only written by
    the shift coordinator, inside the same transaction as the trip change.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "driver_shifts"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    driver_id = Column(String(36), ForeignKey("drivers.id"), nullable=False, index=True)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=False)

    trip_id = Column(
        String(36),
        ForeignKey("trips.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        doc="Trip whose lifetime this shift mirrors"
    )

    check_in_at = Column(UTCDateTime, nullable=False)
    check_out_at = Column(UTCDateTime, nullable=True)

    status = Column(
        Enum(ShiftStatus, native_enum=False, length=20, validate_strings=True),
        nullable=False,
        default=ShiftStatus.ACTIVE,
    )

    location = Column(String(200), nullable=True, doc="Where the driver checked in")
    notes = Column(Text, nullable=True, doc="Emergency reason while in EMERGENCY")

    __table_args__ = (
        Index(
            "uq_driver_shifts_driver_open", "driver_id",
            unique=True,
            postgresql_where=_OPEN,
            sqlite_where=_OPEN,
        ),
    )

    def __repr__(self) -> str:
        return f"<DriverShift(driver_id={self.driver_id!r}, trip_id={self.trip_id!r}, status={self.status!r})>"
