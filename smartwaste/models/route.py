"""
Route database models.
Includes CollectionRoute and RouteStop (ordered association with bins).
"""

import enum
from datetime import datetime, date
from typing import List, TYPE_CHECKING

from sqlalchemy import Integer, Date, DateTime, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from smartwaste.database import Base

if TYPE_CHECKING:
    from smartwaste.models.bin import Bin
    from smartwaste.models.driver import Driver


class RouteStatus(str, enum.Enum):
    """Lifecycle of a collection route."""
    PENDING = "pending"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# Routes in these states lock their bins against rising sensor readings
ACTIVE_STATUSES = (RouteStatus.ASSIGNED, RouteStatus.IN_PROGRESS)


class CollectionRoute(Base):
    """
    A driver's collection route for one day.
    Stop order is fixed when the route is created.
    """
    __tablename__ = "collection_routes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    driver_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("drivers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    route_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[RouteStatus] = mapped_column(
        Enum(
            RouteStatus,
            name="route_status",
            native_enum=False,
            length=20,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
        default=RouteStatus.PENDING,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
    )

    # Relationships
    driver: Mapped["Driver"] = relationship("Driver", back_populates="routes")
    stops: Mapped[List["RouteStop"]] = relationship(
        "RouteStop",
        back_populates="route",
        cascade="all, delete-orphan",
        order_by="RouteStop.stop_order",
    )

    @property
    def bin_ids(self) -> List[int]:
        return [stop.bin_id for stop in self.stops]

    def __repr__(self) -> str:
        return f"<CollectionRoute(id={self.id}, date={self.route_date}, status={self.status.value})>"


class RouteStop(Base):
    """
    Association table linking routes to bins with stop order.
    """
    __tablename__ = "route_stops"

    route_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("collection_routes.id", ondelete="CASCADE"),
        primary_key=True,
    )
    bin_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("bins.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    stop_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    route: Mapped["CollectionRoute"] = relationship("CollectionRoute", back_populates="stops")
    bin: Mapped["Bin"] = relationship("Bin", back_populates="route_stops")

    def __repr__(self) -> str:
        return f"<RouteStop(route_id={self.route_id}, bin_id={self.bin_id}, order={self.stop_order})>"
