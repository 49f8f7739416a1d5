"""
Room store — admin CRUD with room-number uniqueness.

The availability flag is never written here; only
``app.services.reservations`` flips it.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DuplicateKeyError, NotFoundError, RoomInUseError
from app.models.booking import Booking
from app.models.room import Room
from app.schemas.room import RoomCreate, RoomUpdate
from app.services.reservations import lock_room_row, room_locks

logger = logging.getLogger(__name__)


async def list_rooms(db: AsyncSession, available: bool | None = None) -> list[Room]:
    query = select(Room).order_by(Room.number)
    if available is not None:
        query = query.where(Room.is_available == available)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_room(db: AsyncSession, room_id: int) -> Room:
    room = await db.get(Room, room_id)
    if room is None:
        raise NotFoundError("Room", room_id)
    return room


async def _ensure_number_free(db: AsyncSession, number: int, exclude_id: int | None = None) -> None:
    query = select(Room.id).where(Room.number == number)
    if exclude_id is not None:
        query = query.where(Room.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        raise DuplicateKeyError("number", number, f"Room number {number} already exists")


async def _commit_unique(db: AsyncSession, number: int) -> None:
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise DuplicateKeyError("number", number, f"Room number {number} already exists") from exc


async def create_room(db: AsyncSession, body: RoomCreate) -> Room:
    await _ensure_number_free(db, body.number)
    data = body.model_dump()
    data["category"] = body.category.value
    room = Room(**data, is_available=True)
    db.add(room)
    await _commit_unique(db, body.number)
    await db.refresh(room)
    logger.info("Created room %d (number %d)", room.id, room.number)
    return room


async def update_room(db: AsyncSession, room_id: int, body: RoomUpdate) -> Room:
    room = await get_room(db, room_id)
    changes = body.model_dump(exclude_none=True)
    if "number" in changes:
        await _ensure_number_free(db, changes["number"], exclude_id=room_id)
    if "category" in changes:
        changes["category"] = changes["category"].value

    for field, value in changes.items():
        setattr(room, field, value)

    await _commit_unique(db, room.number)
    await db.refresh(room)
    logger.info("Updated room %d: %s", room_id, sorted(changes))
    return room


async def delete_room(db: AsyncSession, room_id: int) -> Room:
    """Delete a room. Refused while any booking still references it.

    Runs under the same room lock as the reservation engine, so no booking can
    be admitted between the check and the delete.
    """
    async with room_locks.hold(room_id):
        room = await lock_room_row(db, room_id)
        booked = await db.execute(
            select(func.count(Booking.id)).where(Booking.room_id == room_id)
        )
        if (booked.scalar() or 0) > 0:
            await db.rollback()
            raise RoomInUseError(
                "Room has bookings; cancel them first",
                context={"room_id": room_id},
            )
        number = room.number
        await db.delete(room)
        await db.commit()
    logger.info("Deleted room %d (number %d)", room_id, number)
    return room
