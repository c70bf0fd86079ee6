"""
Room availability for a stay.

A room is free for ``[check_in, check_out)`` when no booking other than a
cancelled one overlaps that half-open range and the room is not out of
service. Touching stays (one checks out the day the next checks in) do not
overlap.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hotelx.core.exceptions import InvalidDateRange, RoomNotFound
from hotelx.models.booking import Booking, BookingStatus
from hotelx.models.room import Room, RoomStatus


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    return a_start < b_end and b_start < a_end


def validate_stay_dates(check_in: date, check_out: date) -> None:
    if check_in >= check_out:
        raise InvalidDateRange(check_in, check_out)


def overlapping_bookings_clause(check_in: date, check_out: date):
    """SQL form of ranges_overlap against every non-cancelled booking."""
    return and_(
        Booking.status != BookingStatus.CANCELLED,
        Booking.check_in_date < check_out,
        Booking.check_out_date > check_in,
    )


class AvailabilityService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_available_rooms(
        self,
        check_in: date,
        check_out: date,
        category_id: Optional[int] = None,
    ) -> List[Room]:
        """Rooms (with category loaded) that can take a new booking for the range"""
        validate_stay_dates(check_in, check_out)

        booked_room_ids = select(Booking.room_id).where(
            overlapping_bookings_clause(check_in, check_out)
        )
        stmt = (
            select(Room)
            .options(selectinload(Room.category))
            .where(
                Room.status != RoomStatus.MAINTENANCE,
                Room.id.notin_(booked_room_ids),
            )
            .order_by(Room.room_number)
        )
        if category_id is not None:
            stmt = stmt.where(Room.category_id == category_id)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def has_conflict(
        self,
        room_id: int,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[int] = None,
    ) -> bool:
        conditions = [
            Booking.room_id == room_id,
            overlapping_bookings_clause(check_in, check_out),
        ]
        if exclude_booking_id is not None:
            conditions.append(Booking.id != exclude_booking_id)

        stmt = select(func.count(Booking.id)).where(and_(*conditions))
        result = await self.db.execute(stmt)
        return (result.scalar() or 0) > 0

    async def is_room_available(
        self, room_id: int, check_in: date, check_out: date
    ) -> bool:
        validate_stay_dates(check_in, check_out)

        room = await self.db.get(Room, room_id)
        if room is None:
            raise RoomNotFound(room_id)
        if room.status == RoomStatus.MAINTENANCE:
            return False
        return not await self.has_conflict(room_id, check_in, check_out)
