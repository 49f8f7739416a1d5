"""
Public room catalogue — no session required.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db
from app.models.room import Room
from app.schemas.room import RoomRead
from app.services import rooms as room_store

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.get("", response_model=list[RoomRead])
async def list_rooms(
    available: bool | None = None,
    db: AsyncSession = Depends(get_db),
) -> list[Room]:
    """All rooms, or only those currently marked free with ``?available=true``."""
    return await room_store.list_rooms(db, available=available)


@router.get("/{room_id}", response_model=RoomRead)
async def get_room(room_id: int, db: AsyncSession = Depends(get_db)) -> Room:
    return await room_store.get_room(db, room_id)
