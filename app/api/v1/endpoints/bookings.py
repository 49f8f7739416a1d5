"""
Booking endpoints for signed-in guests.

- GET /bookings lists the caller's own stays.
- POST /bookings runs the payload through ``parse_booking_form`` before the
  reservation engine sees it.
- GET / DELETE /bookings/{id} are limited to the owner (or an admin).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db, require_authenticated
from app.core.errors import InvalidInputError
from app.models.booking import Booking
from app.schemas.booking import BookingForm, BookingRead, parse_booking_form
from app.schemas.common import MessageResponse
from app.services import reservations
from app.services.sessions import ActiveSession

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("", response_model=list[BookingRead])
async def list_my_bookings(
    db: AsyncSession = Depends(get_db),
    session: ActiveSession = Depends(require_authenticated),
) -> list[Booking]:
    return await reservations.list_bookings_for_user(db, session.user_id)


@router.post("", response_model=BookingRead, status_code=201)
async def create_booking(
    form: BookingForm,
    db: AsyncSession = Depends(get_db),
    session: ActiveSession = Depends(require_authenticated),
) -> Booking:
    command, errors = parse_booking_form(form)
    if command is None:
        raise InvalidInputError(
            [e.to_dict() for e in errors],
            submitted=form.model_dump(mode="json"),
        )
    return await reservations.create_booking(db, session.user_id, command)


@router.get("/{booking_id}", response_model=BookingRead)
async def get_booking(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    session: ActiveSession = Depends(require_authenticated),
) -> Booking:
    """Booking confirmation view."""
    return await reservations.get_booking(db, session.user_id, session.role, booking_id)


@router.delete("/{booking_id}", response_model=MessageResponse)
async def cancel_booking(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    session: ActiveSession = Depends(require_authenticated),
) -> MessageResponse:
    await reservations.cancel_booking(db, session.user_id, session.role, booking_id)
    return MessageResponse(message="Booking canceled successfully")
