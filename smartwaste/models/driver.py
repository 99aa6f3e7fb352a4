"""
Driver database model.
"""

from datetime import datetime
from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import String, Float, Integer, DateTime, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from smartwaste.database import Base

if TYPE_CHECKING:
    from smartwaste.models.route import CollectionRoute


class Driver(Base):
    """
    Driver model representing collection truck drivers.
    Only `available` and the last known position matter to route planning.
    """
    __tablename__ = "drivers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    vehicle_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    # Last reported position, start point for stop ordering
    last_latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    last_longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    routes: Mapped[List["CollectionRoute"]] = relationship(
        "CollectionRoute",
        back_populates="driver",
        cascade="all, delete-orphan",
    )

    @property
    def has_location(self) -> bool:
        return self.last_latitude is not None and self.last_longitude is not None

    def __repr__(self) -> str:
        return f"<Driver(id={self.id}, name={self.name}, available={self.available})>"
