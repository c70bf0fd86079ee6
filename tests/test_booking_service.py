import asyncio
import re
from datetime import date, timedelta
from decimal import Decimal

import pytest

from hotelx.core.exceptions import (
    BookingNotFound,
    GuestNotFound,
    InvalidDateRange,
    InvalidStatusTransition,
    RoomAlreadyBooked,
    RoomNotFound,
    RoomUnavailable,
)
from hotelx.core.locks import KeyedLock
from hotelx.models.booking import BookingStatus
from hotelx.models.payment import Payment, PaymentMethod, PaymentStatus
from hotelx.models.room import Room, RoomStatus
from hotelx.schemas.booking import BookingCreate, BookingUpdate
from hotelx.services.booking_service import BookingService
from hotelx.services.room_service import RoomService


@pytest.fixture
def service(db, locks):
    return BookingService(db, locks)


def booking_request(hotel, check_in, check_out, room_index=0, **extra):
    return BookingCreate(
        guest_id=hotel["guest_id"],
        room_id=hotel["room_ids"][room_index],
        check_in_date=check_in,
        check_out_date=check_out,
        **extra,
    )


async def room_status(db, room_id) -> RoomStatus:
    room = await RoomService(db).get_by_id(room_id)
    return room.status


async def test_create_booking(service, db, hotel, stay):
    booking = await service.create(booking_request(hotel, *stay, adults=2))

    assert booking.status == BookingStatus.NEW
    assert re.fullmatch(r"BK-[A-Z0-9]{6}", booking.booking_number)
    # 3 nights at the standard rate
    assert booking.total_price == Decimal("300.00")
    assert booking.room.category.name == "Standard"
    assert booking.payment is None
    assert await room_status(db, booking.room_id) == RoomStatus.RESERVED


async def test_explicit_total_price_is_kept(service, hotel, stay):
    booking = await service.create(
        booking_request(hotel, *stay, total_price=Decimal("199.99"))
    )

    assert booking.total_price == Decimal("199.99")


async def test_lookup_by_number(service, hotel, stay):
    booking = await service.create(booking_request(hotel, *stay))

    found = await service.get_by_number(booking.booking_number)

    assert found.id == booking.id
    assert await service.get_by_number("BK-NOPE00") is None


async def test_overlapping_booking_is_rejected(service, hotel, stay):
    await service.create(booking_request(hotel, *stay))

    with pytest.raises(RoomAlreadyBooked):
        await service.create(
            booking_request(hotel, stay[0] + timedelta(days=1), stay[1] + timedelta(days=2))
        )

    assert len(await service.get_all()) == 1


async def test_touching_bookings_are_accepted(service, db, hotel, stay):
    first = await service.create(booking_request(hotel, *stay))
    second = await service.create(
        booking_request(hotel, stay[1], stay[1] + timedelta(days=2))
    )

    assert first.room_id == second.room_id
    assert await room_status(db, first.room_id) == RoomStatus.RESERVED


@pytest.mark.parametrize("nights", [0, -1])
async def test_check_out_must_follow_check_in(service, hotel, nights):
    check_in = date(2026, 11, 10)

    with pytest.raises(InvalidDateRange):
        await service.create(
            booking_request(hotel, check_in, check_in + timedelta(days=nights))
        )


async def test_unknown_guest_or_room(service, hotel, stay):
    with pytest.raises(GuestNotFound):
        await service.create(
            BookingCreate(
                guest_id=999,
                room_id=hotel["room_ids"][0],
                check_in_date=stay[0],
                check_out_date=stay[1],
            )
        )
    with pytest.raises(RoomNotFound):
        await service.create(
            BookingCreate(
                guest_id=hotel["guest_id"],
                room_id=999,
                check_in_date=stay[0],
                check_out_date=stay[1],
            )
        )


async def test_room_under_maintenance_cannot_be_booked(service, db, hotel, stay):
    room = await db.get(Room, hotel["room_ids"][0])
    room.status = RoomStatus.MAINTENANCE
    await db.commit()

    with pytest.raises(RoomUnavailable):
        await service.create(booking_request(hotel, *stay))


async def test_full_stay_moves_room_through_statuses(service, db, hotel, stay):
    booking = await service.create(booking_request(hotel, *stay))

    booking = await service.update(booking.id, BookingUpdate(status=BookingStatus.CONFIRMED))
    assert booking.status == BookingStatus.CONFIRMED
    assert await room_status(db, booking.room_id) == RoomStatus.RESERVED

    booking = await service.check_in(booking.id)
    assert booking.status == BookingStatus.CHECKED_IN
    assert await room_status(db, booking.room_id) == RoomStatus.OCCUPIED

    booking = await service.check_out(booking.id)
    assert booking.status == BookingStatus.CHECKED_OUT
    assert await room_status(db, booking.room_id) == RoomStatus.AVAILABLE


async def test_check_in_requires_confirmation(service, hotel, stay):
    booking = await service.create(booking_request(hotel, *stay))

    with pytest.raises(InvalidStatusTransition):
        await service.check_in(booking.id)

    assert (await service.get_by_id(booking.id)).status == BookingStatus.NEW


async def test_checked_in_booking_cannot_be_cancelled(service, hotel, stay):
    booking = await service.create(booking_request(hotel, *stay))
    await service.update(booking.id, BookingUpdate(status=BookingStatus.CONFIRMED))
    await service.check_in(booking.id)

    with pytest.raises(InvalidStatusTransition):
        await service.cancel(booking.id)


async def test_repeated_check_in_is_a_no_op(service, hotel, stay):
    booking = await service.create(booking_request(hotel, *stay))
    await service.update(booking.id, BookingUpdate(status=BookingStatus.CONFIRMED))
    first = await service.check_in(booking.id)
    updated_at = first.updated_at

    again = await service.check_in(booking.id)

    assert again.status == BookingStatus.CHECKED_IN
    assert again.updated_at == updated_at


async def test_cancel_frees_room_for_rebooking(service, db, hotel, stay):
    booking = await service.create(booking_request(hotel, *stay))

    cancelled = await service.cancel(booking.id, "guest changed plans")

    assert cancelled.status == BookingStatus.CANCELLED
    assert "guest changed plans" in cancelled.special_requests
    assert await room_status(db, booking.room_id) == RoomStatus.AVAILABLE

    rebooked = await service.create(booking_request(hotel, *stay))
    assert rebooked.status == BookingStatus.NEW
    assert rebooked.booking_number != booking.booking_number


async def test_cancelling_one_booking_keeps_room_held_by_another(service, db, hotel, stay):
    first = await service.create(booking_request(hotel, *stay))
    await service.create(booking_request(hotel, stay[1], stay[1] + timedelta(days=1)))

    await service.cancel(first.id)

    assert await room_status(db, first.room_id) == RoomStatus.RESERVED


async def test_update_dates_rechecks_overlap(service, hotel, stay):
    first = await service.create(booking_request(hotel, *stay))
    second = await service.create(
        booking_request(hotel, stay[1], stay[1] + timedelta(days=3))
    )

    with pytest.raises(RoomAlreadyBooked):
        await service.update(
            second.id, BookingUpdate(check_in_date=stay[1] - timedelta(days=1))
        )
    with pytest.raises(InvalidDateRange):
        await service.update(first.id, BookingUpdate(check_out_date=stay[0]))

    unchanged = await service.get_by_id(second.id)
    assert unchanged.check_in_date == stay[1]


async def test_update_dates_ignores_own_booking(service, hotel, stay):
    booking = await service.create(booking_request(hotel, *stay))

    extended = await service.update(
        booking.id, BookingUpdate(check_out_date=stay[1] + timedelta(days=1))
    )

    assert extended.check_out_date == stay[1] + timedelta(days=1)
    assert extended.total_price == Decimal("400.00")


async def test_moving_booking_releases_old_room(service, db, hotel, stay):
    booking = await service.create(booking_request(hotel, *stay))
    suite_id = hotel["room_ids"][2]

    moved = await service.update(booking.id, BookingUpdate(room_id=suite_id))

    assert moved.room_id == suite_id
    assert moved.total_price == Decimal("750.00")
    assert await room_status(db, hotel["room_ids"][0]) == RoomStatus.AVAILABLE
    assert await room_status(db, suite_id) == RoomStatus.RESERVED


async def test_delete_removes_payments_and_frees_room(service, db, hotel, stay):
    booking = await service.create(booking_request(hotel, *stay))
    db.add(
        Payment(
            booking_id=booking.id,
            amount=Decimal("300.00"),
            payment_method=PaymentMethod.VISA,
            status=PaymentStatus.UNPAID,
        )
    )
    await db.commit()

    assert await service.delete(booking.id) is True

    assert await service.get_by_id(booking.id) is None
    assert await db.get(Payment, 1) is None
    assert await room_status(db, booking.room_id) == RoomStatus.AVAILABLE
    with pytest.raises(BookingNotFound):
        await service.delete(booking.id)


async def test_concurrent_bookings_for_one_room_admit_exactly_one(
    session_factory, hotel, stay
):
    shared_locks = KeyedLock()

    async def attempt(offset):
        async with session_factory() as session:
            service = BookingService(session, shared_locks)
            try:
                await service.create(
                    booking_request(
                        hotel, stay[0] + timedelta(days=offset % 2), stay[1]
                    )
                )
                return True
            except RoomAlreadyBooked:
                return False

    results = await asyncio.gather(*(attempt(i) for i in range(6)))

    assert results.count(True) == 1
    assert len(shared_locks) == 0
