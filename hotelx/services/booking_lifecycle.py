"""
Booking status machine and the room status it implies.

    new -> confirmed -> checked_in -> checked_out
    new | confirmed -> cancelled

A checked-in stay can only be completed, never cancelled. Room status is not
tracked per event but recomputed from the bookings still holding the room.
"""

from typing import Dict, FrozenSet, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hotelx.core.exceptions import InvalidStatusTransition
from hotelx.models.booking import Booking, BookingStatus
from hotelx.models.room import RoomStatus

ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.NEW: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.CHECKED_IN, BookingStatus.CANCELLED}
    ),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.CHECKED_OUT}),
    BookingStatus.CHECKED_OUT: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

# Bookings in these states keep their room out of circulation
HOLDING_STATUSES = (BookingStatus.NEW, BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN)


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(current: BookingStatus, target: BookingStatus) -> bool:
    """
    Validate a status change.

    Returns True when the booking actually changes state and False for a
    repeat of the current status, which is accepted as a no-op.

    Raises:
        InvalidStatusTransition: If the state machine has no such edge
    """
    if current == target:
        return False
    if not can_transition(current, target):
        raise InvalidStatusTransition("Booking", current.value, target.value)
    return True


def room_status_for(booking_statuses: Iterable[BookingStatus]) -> RoomStatus:
    """Room status implied by the statuses of every booking on that room."""
    statuses = set(booking_statuses)
    if BookingStatus.CHECKED_IN in statuses:
        return RoomStatus.OCCUPIED
    if statuses & {BookingStatus.NEW, BookingStatus.CONFIRMED}:
        return RoomStatus.RESERVED
    return RoomStatus.AVAILABLE


def resolve_room_status(requested: RoomStatus, derived: RoomStatus) -> RoomStatus:
    """
    Room status to store given what is requested and what the bookings imply.

    Maintenance holds unless a guest is checked in. Any other request yields
    the derived status, so a room held by a booking cannot be released by hand.
    """
    if requested == RoomStatus.MAINTENANCE and derived != RoomStatus.OCCUPIED:
        return RoomStatus.MAINTENANCE
    return derived


async def derived_room_status(db: AsyncSession, room_id: int) -> RoomStatus:
    """Room status implied by the bookings currently holding ``room_id``."""
    result = await db.execute(
        select(Booking.status)
        .where(Booking.room_id == room_id, Booking.status.in_(HOLDING_STATUSES))
        .distinct()
    )
    return room_status_for(result.scalars().all())
