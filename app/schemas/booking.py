"""Pydantic schemas for bookings, plus the typed command the engine consumes."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel

from app.schemas.room import RoomRead
from app.schemas.user import EMAIL_RE, UserRead

_PHONE_RE = re.compile(r"^[0-9]{10}$")


# ── Inbound form ────────────────────────────────────────────────────
class BookingForm(BaseModel):
    """Raw booking payload. Every field is loose; ``parse_booking_form`` types it."""

    room_id: Any = None
    check_in: Any = None
    check_out: Any = None
    name: Any = None
    email: Any = None
    phone: Any = None


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True)
class CreateBookingCommand:
    room_id: int
    check_in: date
    check_out: date
    name: str
    email: str
    phone: str


def _parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def _parse_room_id(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
        return parsed if parsed > 0 else None
    return None


def parse_booking_form(
    form: BookingForm,
) -> tuple[CreateBookingCommand | None, list[FieldError]]:
    """Validate *form* and build a command. Returns ``(None, errors)`` on failure."""
    errors: list[FieldError] = []

    room_id = _parse_room_id(form.room_id)
    if room_id is None:
        errors.append(FieldError("room_id", "Invalid room selection"))

    check_in = _parse_date(form.check_in)
    if check_in is None:
        errors.append(FieldError("check_in", "Invalid check-in date"))
    check_out = _parse_date(form.check_out)
    if check_out is None:
        errors.append(FieldError("check_out", "Invalid check-out date"))
    elif check_in is not None and check_out <= check_in:
        errors.append(FieldError("check_out", "Check-out must be after check-in"))

    name = form.name.strip() if isinstance(form.name, str) else ""
    if not name:
        errors.append(FieldError("name", "Name is required"))

    email = form.email.strip().lower() if isinstance(form.email, str) else ""
    if not EMAIL_RE.match(email):
        errors.append(FieldError("email", "Valid email is required"))

    phone = form.phone.strip() if isinstance(form.phone, str) else ""
    if not _PHONE_RE.match(phone):
        errors.append(FieldError("phone", "Phone number must be 10 digits"))

    if errors:
        return None, errors
    return (
        CreateBookingCommand(
            room_id=room_id,  # type: ignore[arg-type]
            check_in=check_in,  # type: ignore[arg-type]
            check_out=check_out,  # type: ignore[arg-type]
            name=name,
            email=email,
            phone=phone,
        ),
        [],
    )


# ── Outbound ────────────────────────────────────────────────────────
class BookingRead(BaseModel):
    id: int
    room_id: int
    user_id: int
    check_in: date
    check_out: date
    created_at: datetime | None
    name: str
    email: str
    phone: str
    room: RoomRead | None = None

    model_config = {"from_attributes": True}


class AdminBookingRead(BookingRead):
    user: UserRead | None = None


class DashboardResponse(BaseModel):
    room_count: int
    booking_count: int
    recent_bookings: list[AdminBookingRead]
