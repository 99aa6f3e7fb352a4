"""
Bin database models.
Includes Bin and BinFillHistory (append-only fill snapshots).
"""

from datetime import datetime
from typing import List, TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from smartwaste.database import Base

if TYPE_CHECKING:
    from smartwaste.models.route import RouteStop


class Bin(Base):
    """
    Waste bin with a location and its last known fill level.
    `overflow` is re-derived from `fill_level` by every core writer.
    """
    __tablename__ = "bins"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    fill_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    overflow: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

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
    route_stops: Mapped[List["RouteStop"]] = relationship(
        "RouteStop",
        back_populates="bin",
        cascade="all, delete-orphan",
    )
    history: Mapped[List["BinFillHistory"]] = relationship(
        "BinFillHistory",
        back_populates="bin",
        cascade="all, delete-orphan",
    )

    @property
    def needs_collection(self) -> bool:
        """True while the bin still holds waste or is flagged as overflowing."""
        return self.fill_level > 0 or self.overflow

    def __repr__(self) -> str:
        return f"<Bin(id={self.id}, fill_level={self.fill_level}, overflow={self.overflow})>"


class BinFillHistory(Base):
    """One snapshot row per bin per recorder tick."""
    __tablename__ = "bin_fill_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    bin_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("bins.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    fill_level: Mapped[int] = mapped_column(Integer, nullable=False)
    overflow: Mapped[bool] = mapped_column(Boolean, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True,
    )

    bin: Mapped["Bin"] = relationship("Bin", back_populates="history")

    def __repr__(self) -> str:
        return f"<BinFillHistory(bin_id={self.bin_id}, fill_level={self.fill_level})>"
