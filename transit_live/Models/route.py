# transit_live/Models/route.py
from sqlalchemy import Column, String, Float, Integer, ForeignKey, CheckConstraint, Index, UniqueConstraint
from sqlalchemy.orm import declared_attr, relationship
from transit_live.DB.base_class import Base


class Route(Base):
    """
    SQLAlchemy model for a route definition.

    Routes and their points are owned by the route editor; this service only
    reads them to materialize a trip's stop schedule.

    Related models:
    - RoutePoint (1:N) - ordered stops of the route
    - Trip (1:N) - executions of the route
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "routes"

    id = Column(String(36), primary_key=True)

    tenant_id = Column(
        String(36),
        nullable=True,
        index=True,
        doc="Tenant that owns the route"
    )

    code = Column(String(50), nullable=True, doc="Short route code shown to passengers")
    name = Column(String(200), nullable=False)

    points = relationship(
        "RoutePoint",
        back_populates="route",
        order_by="RoutePoint.order",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Route(id={self.id!r}, name={self.name!r})>"


class RoutePoint(Base):
    """
    One stop of a route with its coordinates and position in the route.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "route_points"

    id = Column(String(36), primary_key=True)

    route_id = Column(
        String(36),
        ForeignKey("routes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String(200), nullable=False)
    latitude = Column(Float, nullable=False, doc="Latitude in decimal degrees")
    longitude = Column(Float, nullable=False, doc="Longitude in decimal degrees")
    order = Column(Integer, nullable=False, doc="Position of the stop along the route")

    route = relationship("Route", back_populates="points")

    __table_args__ = (
        UniqueConstraint("route_id", "order", name="uq_route_points_route_order"),
        Index("idx_route_points_route_order", "route_id", "order"),
        CheckConstraint("latitude >= -90 AND latitude <= 90", name="check_lat_range"),
        CheckConstraint("longitude >= -180 AND longitude <= 180", name="check_lon_range"),
    )

    def __repr__(self) -> str:
        return f"<RoutePoint(id={self.id!r}, route_id={self.route_id!r}, order={self.order})>"
