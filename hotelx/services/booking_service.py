import logging
import random
import string
from contextlib import asynccontextmanager
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hotelx.core.exceptions import (
    BookingNotFound,
    DomainException,
    GuestNotFound,
    RoomAlreadyBooked,
    RoomNotFound,
    RoomUnavailable,
)
from hotelx.core.locks import KeyedLock, room_key
from hotelx.models.booking import Booking, BookingStatus
from hotelx.models.guest import Guest
from hotelx.models.room import Room, RoomCategory, RoomStatus
from hotelx.schemas.booking import BookingCreate, BookingUpdate
from hotelx.services.availability_service import (
    AvailabilityService,
    validate_stay_dates,
)
from hotelx.services.booking_lifecycle import (
    derived_room_status,
    ensure_transition,
    resolve_room_status,
)

logger = logging.getLogger(__name__)

BOOKING_NUMBER_PREFIX = "BK-"


def make_booking_number() -> str:
    return BOOKING_NUMBER_PREFIX + "".join(
        random.choices(string.ascii_uppercase + string.digits, k=6)
    )


class BookingService:
    def __init__(self, db: AsyncSession, locks: KeyedLock):
        self.db = db
        self.locks = locks
        self.availability = AvailabilityService(db)

    @staticmethod
    def _details_query():
        return select(Booking).options(
            selectinload(Booking.guest),
            selectinload(Booking.room).selectinload(Room.category),
            selectinload(Booking.payments),
        )

    @asynccontextmanager
    async def _room_section(self, *room_ids: int):
        """Serialize availability-affecting writes for the given rooms."""
        async with self.locks.hold_many(*(room_key(room_id) for room_id in room_ids)):
            yield

    async def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[BookingStatus] = None,
    ) -> List[Booking]:
        stmt = select(Booking).order_by(Booking.id).offset(skip).limit(limit)
        if status is not None:
            stmt = stmt.where(Booking.status == status)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_all_with_details(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[BookingStatus] = None,
    ) -> List[Booking]:
        stmt = self._details_query().order_by(Booking.id).offset(skip).limit(limit)
        if status is not None:
            stmt = stmt.where(Booking.status == status)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, booking_id: int) -> Optional[Booking]:
        stmt = select(Booking).where(Booking.id == booking_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_number(self, booking_number: str) -> Optional[Booking]:
        stmt = self._details_query().where(Booking.booking_number == booking_number)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_with_details(self, booking_id: int) -> Optional[Booking]:
        """Get booking with guest, room (with category) and payments loaded"""
        stmt = self._details_query().where(Booking.id == booking_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _get_or_raise(self, booking_id: int) -> Booking:
        booking = await self.get_by_id(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    async def _reload(self, booking_id: int) -> Booking:
        stmt = (
            self._details_query()
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def _lock_room(self, room_id: int) -> Room:
        # FOR UPDATE serializes across processes on PostgreSQL; SQLite ignores it
        stmt = (
            select(Room)
            .where(Room.id == room_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        room = result.scalar_one_or_none()
        if room is None:
            raise RoomNotFound(room_id)
        return room

    async def _generate_booking_number(self) -> str:
        for _ in range(10):
            number = make_booking_number()
            exists = await self.db.execute(
                select(Booking.id).where(Booking.booking_number == number)
            )
            if exists.scalar_one_or_none() is None:
                return number
        raise DomainException("Could not allocate a booking number")

    async def _price_for_stay(self, room: Room, nights: int):
        category = await self.db.get(RoomCategory, room.category_id)
        return category.base_price * nights

    async def sync_room_status(self, room_id: int) -> Optional[RoomStatus]:
        """
        Recompute a room's status from the bookings still holding it.

        Pending changes are flushed first, so the caller's booking edits are
        taken into account. A room under maintenance keeps that status unless
        a guest is checked in.
        """
        derived = await derived_room_status(self.db, room_id)

        room = await self.db.get(Room, room_id)
        if room is None:
            return None
        status = resolve_room_status(room.status, derived)
        if room.status != status:
            logger.info(
                f"Room {room.room_number} status {room.status.value} -> {status.value}"
            )
            room.status = status
        return room.status

    async def create(self, booking_data: BookingCreate) -> Booking:
        check_in = booking_data.check_in_date
        check_out = booking_data.check_out_date
        validate_stay_dates(check_in, check_out)

        async with self._room_section(booking_data.room_id):
            guest = await self.db.get(Guest, booking_data.guest_id)
            if guest is None:
                raise GuestNotFound(booking_data.guest_id)

            room = await self._lock_room(booking_data.room_id)
            if room.status == RoomStatus.MAINTENANCE:
                raise RoomUnavailable(room.id, room.status.value)

            if await self.availability.has_conflict(room.id, check_in, check_out):
                raise RoomAlreadyBooked(room.id, check_in, check_out)

            total_price = booking_data.total_price
            if total_price is None:
                total_price = await self._price_for_stay(
                    room, (check_out - check_in).days
                )

            db_booking = Booking(
                **booking_data.model_dump(exclude={"total_price"}),
                booking_number=await self._generate_booking_number(),
                status=BookingStatus.NEW,
                total_price=total_price,
            )
            self.db.add(db_booking)
            await self.sync_room_status(room.id)
            await self.db.commit()

        logger.info(
            f"Booking {db_booking.booking_number} created for room {room.room_number} "
            f"({check_in} to {check_out})"
        )
        return await self._reload(db_booking.id)

    async def update(self, booking_id: int, booking_data: BookingUpdate) -> Booking:
        current = await self._get_or_raise(booking_id)
        # Non-nullable columns ignore explicit nulls
        update_data = {
            field: value
            for field, value in booking_data.model_dump(exclude_unset=True).items()
            if value is not None or field == "special_requests"
        }
        target_room_id = update_data.get("room_id", current.room_id)

        async with self._room_section(current.room_id, target_room_id):
            booking = await self._reload(booking_id)
            old_room_id = booking.room_id

            check_in = update_data.get("check_in_date", booking.check_in_date)
            check_out = update_data.get("check_out_date", booking.check_out_date)
            dates_changed = (check_in, check_out) != (
                booking.check_in_date,
                booking.check_out_date,
            )
            room_changed = target_room_id != old_room_id
            validate_stay_dates(check_in, check_out)

            target_status = update_data.get("status", booking.status)
            ensure_transition(booking.status, target_status)

            if "guest_id" in update_data:
                if await self.db.get(Guest, update_data["guest_id"]) is None:
                    raise GuestNotFound(update_data["guest_id"])

            room = await self._lock_room(target_room_id)
            if room_changed and room.status == RoomStatus.MAINTENANCE:
                raise RoomUnavailable(room.id, room.status.value)

            if (dates_changed or room_changed) and target_status != BookingStatus.CANCELLED:
                if await self.availability.has_conflict(
                    target_room_id, check_in, check_out, exclude_booking_id=booking.id
                ):
                    raise RoomAlreadyBooked(target_room_id, check_in, check_out)

            if (dates_changed or room_changed) and "total_price" not in update_data:
                update_data["total_price"] = await self._price_for_stay(
                    room, (check_out - check_in).days
                )

            for field, value in update_data.items():
                setattr(booking, field, value)

            await self.sync_room_status(target_room_id)
            if room_changed:
                await self.sync_room_status(old_room_id)
            await self.db.commit()

        logger.info(f"Booking {booking.booking_number} updated: {sorted(update_data)}")
        return await self._reload(booking_id)

    async def _change_status(
        self, booking_id: int, target: BookingStatus, note: Optional[str] = None
    ) -> Booking:
        current = await self._get_or_raise(booking_id)

        async with self._room_section(current.room_id):
            booking = await self._reload(booking_id)
            if ensure_transition(booking.status, target):
                previous = booking.status
                booking.status = target
                if note:
                    booking.special_requests = (
                        f"{booking.special_requests or ''}\n{note}".strip()
                    )
                await self.sync_room_status(booking.room_id)
                await self.db.commit()
                logger.info(
                    f"Booking {booking.booking_number} {previous.value} -> {target.value}"
                )

        return await self._reload(booking_id)

    async def check_in(self, booking_id: int) -> Booking:
        """Process check-in for a confirmed booking"""
        return await self._change_status(booking_id, BookingStatus.CHECKED_IN)

    async def check_out(self, booking_id: int) -> Booking:
        """Process check-out for a checked-in booking"""
        return await self._change_status(booking_id, BookingStatus.CHECKED_OUT)

    async def cancel(self, booking_id: int, reason: Optional[str] = None) -> Booking:
        note = f"Cancelled: {reason}" if reason else None
        return await self._change_status(booking_id, BookingStatus.CANCELLED, note)

    async def delete(self, booking_id: int) -> bool:
        current = await self._get_or_raise(booking_id)

        async with self._room_section(current.room_id):
            booking = await self._reload(booking_id)
            room_id = booking.room_id
            booking_number = booking.booking_number

            await self.db.delete(booking)
            await self.sync_room_status(room_id)
            await self.db.commit()

        logger.info(f"Booking {booking_number} deleted, room {room_id} released")
        return True
