"""
Booking model — a stay in one room over the half-open range [check_in, check_out).
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import (CheckConstraint, Column, Date, DateTime, ForeignKey,
                        Index, Integer, String)
from sqlalchemy.orm import relationship

from app.db.base import Base


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_booking_room_range", "room_id", "check_in", "check_out"),
        CheckConstraint("check_out > check_in", name="ck_booking_range"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    room_id: int = Column(Integer, ForeignKey("rooms.id"), nullable=False)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # type: ignore[assignment]
    check_in: date = Column(Date, nullable=False)  # type: ignore[assignment]
    check_out: date = Column(Date, nullable=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    # Contact details captured at booking time
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    email: str = Column(String(320), nullable=False)  # type: ignore[assignment]
    phone: str = Column(String(20), nullable=False)  # type: ignore[assignment]

    room = relationship("Room", back_populates="bookings")
    user = relationship("User", back_populates="bookings")
