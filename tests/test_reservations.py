"""Tests for the reservation engine, driven directly against the store."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (InvalidInputError, NotFoundError,
                             RoomUnavailableError, UnauthorizedError)
from app.models.booking import Booking
from app.models.room import Room
from app.models.user import Role
from app.services import reservations


async def _bookings_for(db: AsyncSession, room_id: int) -> int:
    result = await db.execute(select(func.count(Booking.id)).where(Booking.room_id == room_id))
    return result.scalar()


async def _is_available(db: AsyncSession, room_id: int) -> bool:
    room = await db.get(Room, room_id, populate_existing=True)
    return room.is_available


@pytest.mark.asyncio
async def test_touching_ranges_are_both_admitted(db_session, guest, room, stay):
    first = await reservations.create_booking(db_session, guest.id, stay(room.id, "2024-01-01", "2024-01-05"))
    second = await reservations.create_booking(db_session, guest.id, stay(room.id, "2024-01-05", "2024-01-10"))
    assert first.id != second.id
    assert await _bookings_for(db_session, room.id) == 2


@pytest.mark.asyncio
async def test_touching_on_the_other_side_is_admitted(db_session, guest, room, stay):
    await reservations.create_booking(db_session, guest.id, stay(room.id, "2024-01-05", "2024-01-10"))
    await reservations.create_booking(db_session, guest.id, stay(room.id, "2024-01-01", "2024-01-05"))
    assert await _bookings_for(db_session, room.id) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("check_in", "check_out"),
    [
        ("2024-01-03", "2024-01-06"),  # tail overlap
        ("2023-12-30", "2024-01-02"),  # head overlap
        ("2024-01-02", "2024-01-03"),  # inside
        ("2023-12-01", "2024-02-01"),  # enclosing
        ("2024-01-01", "2024-01-05"),  # identical
    ],
)
async def test_overlapping_range_is_rejected(db_session, guest, other_guest, room, stay, check_in, check_out):
    room_id, other_id = room.id, other_guest.id  # a rejected admission rolls back and expires instances
    await reservations.create_booking(db_session, guest.id, stay(room_id, "2024-01-01", "2024-01-05"))

    with pytest.raises(RoomUnavailableError) as exc_info:
        await reservations.create_booking(db_session, other_id, stay(room_id, check_in, check_out))

    assert exc_info.value.context["room_id"] == room_id
    assert await _bookings_for(db_session, room_id) == 1


@pytest.mark.asyncio
async def test_same_dates_in_another_room_do_not_conflict(db_session, guest, room, second_room, stay):
    await reservations.create_booking(db_session, guest.id, stay(room.id, "2024-01-01", "2024-01-05"))
    await reservations.create_booking(db_session, guest.id, stay(second_room.id, "2024-01-01", "2024-01-05"))
    assert await _bookings_for(db_session, second_room.id) == 1


@pytest.mark.asyncio
async def test_create_then_cancel_flips_availability(db_session, guest, room, stay):
    assert await _is_available(db_session, room.id) is True

    booking = await reservations.create_booking(db_session, guest.id, stay(room.id, "2024-01-01", "2024-01-05"))
    assert await _is_available(db_session, room.id) is False

    await reservations.cancel_booking(db_session, guest.id, Role.GUEST, booking.id)
    assert await _is_available(db_session, room.id) is True
    assert await _bookings_for(db_session, room.id) == 0


@pytest.mark.asyncio
async def test_rejected_booking_leaves_flag_alone(db_session, guest, room, stay):
    room_id, guest_id = room.id, guest.id
    booking = await reservations.create_booking(db_session, guest_id, stay(room_id, "2024-01-01", "2024-01-05"))
    await reservations.cancel_booking(db_session, guest_id, Role.GUEST, booking.id)
    await reservations.create_booking(db_session, guest_id, stay(room_id, "2024-02-01", "2024-02-05"))

    with pytest.raises(RoomUnavailableError):
        await reservations.create_booking(db_session, guest_id, stay(room_id, "2024-02-02", "2024-02-03"))
    assert await _is_available(db_session, room_id) is False


@pytest.mark.asyncio
async def test_cancel_by_stranger_is_unauthorized(db_session, guest, other_guest, room, stay):
    booking = await reservations.create_booking(db_session, guest.id, stay(room.id, "2024-01-01", "2024-01-05"))

    with pytest.raises(UnauthorizedError):
        await reservations.cancel_booking(db_session, other_guest.id, Role.GUEST, booking.id)

    assert await _bookings_for(db_session, room.id) == 1
    assert await _is_available(db_session, room.id) is False


@pytest.mark.asyncio
async def test_admin_may_cancel_any_booking(db_session, guest, admin, room, stay):
    booking = await reservations.create_booking(db_session, guest.id, stay(room.id, "2024-01-01", "2024-01-05"))
    await reservations.cancel_booking(db_session, admin.id, Role.ADMIN, booking.id)
    assert await _bookings_for(db_session, room.id) == 0
    assert await _is_available(db_session, room.id) is True


@pytest.mark.asyncio
async def test_cancel_unknown_booking(db_session, guest):
    with pytest.raises(NotFoundError):
        await reservations.cancel_booking(db_session, guest.id, Role.GUEST, 4242)


@pytest.mark.asyncio
async def test_booking_unknown_room(db_session, guest, stay):
    with pytest.raises(NotFoundError):
        await reservations.create_booking(db_session, guest.id, stay(999, "2024-01-01", "2024-01-05"))


@pytest.mark.asyncio
async def test_engine_refuses_empty_range(db_session, guest, room, stay):
    with pytest.raises(InvalidInputError):
        await reservations.create_booking(db_session, guest.id, stay(room.id, "2024-01-05", "2024-01-05"))
    assert await _bookings_for(db_session, room.id) == 0


@pytest.mark.asyncio
async def test_cancelling_earlier_stay_marks_room_available_despite_later_one(db_session, guest, room, stay):
    """Availability is a plain flag: any cancellation sets it, even with a later stay still booked."""
    early = await reservations.create_booking(db_session, guest.id, stay(room.id, "2024-01-01", "2024-01-05"))
    await reservations.create_booking(db_session, guest.id, stay(room.id, "2024-03-01", "2024-03-05"))

    await reservations.cancel_booking(db_session, guest.id, Role.GUEST, early.id)

    assert await _bookings_for(db_session, room.id) == 1
    assert await _is_available(db_session, room.id) is True


@pytest.mark.asyncio
async def test_list_bookings_for_user_only_returns_own(db_session, guest, other_guest, room, second_room, stay):
    await reservations.create_booking(db_session, guest.id, stay(room.id, "2024-01-01", "2024-01-05"))
    await reservations.create_booking(db_session, guest.id, stay(second_room.id, "2024-02-01", "2024-02-05"))
    await reservations.create_booking(db_session, other_guest.id, stay(room.id, "2024-03-01", "2024-03-05"))

    mine = await reservations.list_bookings_for_user(db_session, guest.id)
    assert len(mine) == 2
    assert all(b.user_id == guest.id for b in mine)
    assert {b.room.number for b in mine} == {101, 102}


@pytest.mark.asyncio
async def test_no_two_live_bookings_overlap(db_session, guest, room, stay):
    """Throw a batch of ranges at one room and check the stored set pairwise."""
    room_id, guest_id = room.id, guest.id
    ranges = [
        ("2024-01-01", "2024-01-04"), ("2024-01-03", "2024-01-06"), ("2024-01-04", "2024-01-07"),
        ("2024-01-06", "2024-01-08"), ("2024-01-07", "2024-01-09"), ("2024-01-02", "2024-01-10"),
        ("2024-01-09", "2024-01-12"), ("2024-01-11", "2024-01-12"),
    ]
    for check_in, check_out in ranges:
        try:
            await reservations.create_booking(db_session, guest_id, stay(room_id, check_in, check_out))
        except RoomUnavailableError:
            pass

    result = await db_session.execute(select(Booking).where(Booking.room_id == room_id))
    live = list(result.scalars().all())
    assert len(live) == 4
    for a in live:
        for b in live:
            if a.id != b.id:
                assert not (a.check_in < b.check_out and a.check_out > b.check_in)
