"""
Admin endpoints — dashboard, room management and booking oversight.

Every route requires the admin role. Booking deletion goes through the
reservation engine so the room's availability flag is restored.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db, require_admin
from app.models.booking import Booking
from app.models.room import Room
from app.schemas.booking import AdminBookingRead, DashboardResponse
from app.schemas.common import MessageResponse
from app.schemas.room import RoomCreate, RoomRead, RoomUpdate
from app.services import reservations
from app.services import rooms as room_store
from app.services.sessions import ActiveSession

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])
logger = logging.getLogger(__name__)


@router.get("", response_model=DashboardResponse)
async def dashboard(db: AsyncSession = Depends(get_db)) -> dict:
    return await reservations.dashboard(db)


# ── Rooms ───────────────────────────────────────────────────────────
@router.get("/rooms", response_model=list[RoomRead])
async def list_rooms(db: AsyncSession = Depends(get_db)) -> list[Room]:
    return await room_store.list_rooms(db)


@router.post("/rooms", response_model=RoomRead, status_code=201)
async def create_room(body: RoomCreate, db: AsyncSession = Depends(get_db)) -> Room:
    return await room_store.create_room(db, body)


@router.put("/rooms/{room_id}", response_model=RoomRead)
async def update_room(
    room_id: int, body: RoomUpdate, db: AsyncSession = Depends(get_db)
) -> Room:
    return await room_store.update_room(db, room_id, body)


@router.delete("/rooms/{room_id}", response_model=MessageResponse)
async def delete_room(room_id: int, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    room = await room_store.delete_room(db, room_id)
    return MessageResponse(message=f"Room {room.number} deleted")


# ── Bookings ────────────────────────────────────────────────────────
@router.get("/bookings", response_model=list[AdminBookingRead])
async def list_bookings(db: AsyncSession = Depends(get_db)) -> list[Booking]:
    return await reservations.list_all_bookings(db)


@router.delete("/bookings/{booking_id}", response_model=MessageResponse)
async def delete_booking(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    admin: ActiveSession = Depends(require_admin),
) -> MessageResponse:
    await reservations.cancel_booking(db, admin.user_id, admin.role, booking_id)
    logger.warning("ADMIN user %d deleted booking %d", admin.user_id, booking_id)
    return MessageResponse(message="Booking canceled successfully")
