"""
Reservation engine — admission, cancellation and listing of bookings.

This module is the only writer of ``Booking`` rows and of
``Room.is_available``. Every create/cancel for a room runs under that room's
lock (in-process) and a ``SELECT ... FOR UPDATE`` on the room row
(cross-process on PostgreSQL, bounded by ``lock_timeout``), so the overlap
check always sees the latest committed bookings and two requests can never
both pass it.

Two stays conflict when their half-open ranges intersect::

    existing.check_in < new.check_out AND existing.check_out > new.check_in

so a check-out on the same day as the next check-in is fine.

Known gap: cancelling any booking marks the room available again even if a
later, non-overlapping booking still holds it.
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import delete as sa_delete
from sqlalchemy import func, select, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.errors import (InvalidInputError, NotFoundError,
                             RoomUnavailableError, TransientError,
                             UnauthorizedError)
from app.models.booking import Booking
from app.models.room import Room
from app.models.user import Role
from app.schemas.booking import CreateBookingCommand
from app.services.locks import RoomLocks

logger = logging.getLogger(__name__)

room_locks = RoomLocks(timeout=settings.LOCK_TIMEOUT_SECONDS)


def lock_timeout_statement(dialect_name: str) -> str | None:
    """Statement bounding row-lock waits for the current transaction, if the dialect has one."""
    if dialect_name != "postgresql":
        return None
    return f"SET LOCAL lock_timeout = '{int(settings.LOCK_TIMEOUT_SECONDS * 1000)}ms'"


async def lock_room_row(db: AsyncSession, room_id: int) -> Room:
    """Load *room_id* with a row lock held until the transaction ends."""
    statement = lock_timeout_statement(db.get_bind().dialect.name)
    if statement is not None:
        await db.execute(text(statement))
    result = await db.execute(select(Room).where(Room.id == room_id).with_for_update())
    room = result.scalar_one_or_none()
    if room is None:
        raise NotFoundError("Room", room_id)
    return room


async def find_conflicts(
    db: AsyncSession, room_id: int, check_in: date, check_out: date
) -> list[Booking]:
    """Bookings on *room_id* whose stay overlaps ``[check_in, check_out)``."""
    result = await db.execute(
        select(Booking).where(
            Booking.room_id == room_id,
            Booking.check_in < check_out,
            Booking.check_out > check_in,
        )
    )
    return list(result.scalars().all())


async def create_booking(
    db: AsyncSession, requester_id: int, command: CreateBookingCommand
) -> Booking:
    """Admit a booking, or raise ``RoomUnavailableError`` without touching the store."""
    if command.check_out <= command.check_in:
        raise InvalidInputError(
            [{"field": "check_out", "message": "Check-out must be after check-in"}]
        )

    async with room_locks.hold(command.room_id):
        try:
            room = await lock_room_row(db, command.room_id)

            conflicts = await find_conflicts(
                db, command.room_id, command.check_in, command.check_out
            )
            if conflicts:
                await db.rollback()
                logger.info(
                    "Room %d unavailable %s..%s (clashes with booking %d)",
                    command.room_id,
                    command.check_in,
                    command.check_out,
                    conflicts[0].id,
                )
                raise RoomUnavailableError(
                    context={
                        "room_id": command.room_id,
                        "check_in": command.check_in.isoformat(),
                        "check_out": command.check_out.isoformat(),
                    }
                )

            booking = Booking(
                room=room,
                user_id=requester_id,
                check_in=command.check_in,
                check_out=command.check_out,
                name=command.name,
                email=command.email,
                phone=command.phone,
            )
            db.add(booking)
            room.is_available = False
            await db.commit()
        except (OperationalError, PoolTimeoutError) as exc:
            await db.rollback()
            logger.warning("Store failure while booking room %d: %s", command.room_id, exc)
            raise TransientError() from exc

    logger.info(
        "Booking %d created: room %d, user %d, %s..%s",
        booking.id,
        command.room_id,
        requester_id,
        command.check_in,
        command.check_out,
    )
    return booking


async def _get_booking(db: AsyncSession, booking_id: int) -> Booking:
    result = await db.execute(
        select(Booking)
        .options(selectinload(Booking.room))
        .where(Booking.id == booking_id)
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFoundError("Booking", booking_id)
    return booking


def _ensure_can_act(booking: Booking, requester_id: int, requester_role: Role) -> None:
    if requester_role == Role.ADMIN or booking.user_id == requester_id:
        return
    raise UnauthorizedError(context={"booking_id": booking.id})


async def get_booking(
    db: AsyncSession, requester_id: int, requester_role: Role, booking_id: int
) -> Booking:
    booking = await _get_booking(db, booking_id)
    _ensure_can_act(booking, requester_id, requester_role)
    return booking


async def cancel_booking(
    db: AsyncSession, requester_id: int, requester_role: Role, booking_id: int
) -> Booking:
    """Delete a booking and mark its room available, all or nothing."""
    booking = await _get_booking(db, booking_id)
    _ensure_can_act(booking, requester_id, requester_role)
    room_id = booking.room_id

    async with room_locks.hold(room_id):
        try:
            # Re-read under the lock; a concurrent cancel may have won.
            booking = await _get_booking(db, booking_id)
            room = await lock_room_row(db, room_id)

            await db.execute(sa_delete(Booking).where(Booking.id == booking_id))
            room.is_available = True
            await db.commit()
        except (OperationalError, PoolTimeoutError) as exc:
            await db.rollback()
            logger.warning("Store failure while cancelling booking %d: %s", booking_id, exc)
            raise TransientError() from exc
        except NotFoundError:
            await db.rollback()
            raise

    logger.info(
        "Booking %d cancelled by user %d (%s); room %d marked available",
        booking_id,
        requester_id,
        requester_role.value,
        room_id,
    )
    return booking


async def list_bookings_for_user(db: AsyncSession, user_id: int) -> list[Booking]:
    result = await db.execute(
        select(Booking)
        .options(selectinload(Booking.room))
        .where(Booking.user_id == user_id)
        .order_by(Booking.check_in.desc())
    )
    return list(result.scalars().all())


async def list_all_bookings(db: AsyncSession) -> list[Booking]:
    result = await db.execute(
        select(Booking)
        .options(selectinload(Booking.room), selectinload(Booking.user))
        .order_by(Booking.check_in.desc())
    )
    return list(result.scalars().all())


async def dashboard(db: AsyncSession) -> dict:
    """Counts and the five most recently created bookings."""
    room_count = await db.execute(select(func.count(Room.id)))
    booking_count = await db.execute(select(func.count(Booking.id)))
    recent = await db.execute(
        select(Booking)
        .options(selectinload(Booking.room), selectinload(Booking.user))
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .limit(5)
    )
    return {
        "room_count": room_count.scalar() or 0,
        "booking_count": booking_count.scalar() or 0,
        "recent_bookings": list(recent.scalars().all()),
    }
