# transit_live/Models/fleet.py
from sqlalchemy import Column, String, Integer, CheckConstraint
from sqlalchemy.orm import declared_attr
from transit_live.DB.base_class import Base


class Vehicle(Base):
    """
    Fleet vehicle as registered by the fleet management module.

    Only the fields the trip lifecycle needs are mapped: tenant scope for
    dashboards and analytics, and registered capacity, which is snapshotted
    onto a trip when it starts.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "vehicles"

    id = Column(String(36), primary_key=True)
    tenant_id = Column(String(36), nullable=True, index=True)
    plate_number = Column(String(20), nullable=True, unique=True)

    capacity = Column(
        Integer,
        nullable=True,
        doc="Registered passenger capacity (NULL if unknown)"
    )

    current_driver_id = Column(String(36), nullable=True)

    __table_args__ = (
        CheckConstraint("capacity IS NULL OR capacity >= 0", name="check_capacity"),
    )

    def __repr__(self) -> str:
        return f"<Vehicle(id={self.id!r}, plate={self.plate_number!r}, capacity={self.capacity})>"


class Driver(Base):
    """Driver identity. Authentication and documents live elsewhere."""

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "drivers"

    id = Column(String(36), primary_key=True)
    tenant_id = Column(String(36), nullable=True, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(200), nullable=True)

    def __repr__(self) -> str:
        return f"<Driver(id={self.id!r}, name={self.name!r})>"
