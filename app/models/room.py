"""
Room model — bookable inventory with a simple availability flag.

``is_available`` is only ever written by the reservation engine: it is
cleared when a booking is created and set again when one is cancelled.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class RoomCategory(str, enum.Enum):
    STANDARD = "Standard"
    DELUXE = "Deluxe"
    SUITE = "Suite"


class Room(Base):
    __tablename__ = "rooms"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    number: int = Column(Integer, unique=True, nullable=False, index=True)  # type: ignore[assignment]
    category: str = Column(String(20), nullable=False)  # type: ignore[assignment]
    description: str | None = Column(String(2000), nullable=True)  # type: ignore[assignment]
    price: float = Column(Float, nullable=False)  # type: ignore[assignment]
    capacity: int = Column(Integer, nullable=False, default=1)  # type: ignore[assignment]
    amenities: list[str] = Column(JSON, nullable=False, default=list)  # type: ignore[assignment]
    is_available: bool = Column(Boolean, nullable=False, default=True, server_default="true")  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    bookings = relationship("Booking", back_populates="room")
