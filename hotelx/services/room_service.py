import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hotelx.core.exceptions import RoomCategoryNotFound, RoomNotFound
from hotelx.core.locks import KeyedLock, room_key
from hotelx.core.service_utils import (
    ensure_exists,
    ensure_no_related_records,
    validate_non_empty_string,
    validate_unique_field,
)
from hotelx.models.booking import Booking
from hotelx.models.room import Room, RoomCategory, RoomStatus
from hotelx.schemas.room import (
    RoomCategoryCreate,
    RoomCategoryUpdate,
    RoomCreate,
    RoomUpdate,
)
from hotelx.services.booking_lifecycle import derived_room_status, resolve_room_status

logger = logging.getLogger(__name__)


class RoomCategoryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_all(self) -> List[RoomCategory]:
        stmt = select(RoomCategory).order_by(RoomCategory.id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, category_id: int) -> Optional[RoomCategory]:
        stmt = select(RoomCategory).where(RoomCategory.id == category_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, category_data: RoomCategoryCreate) -> RoomCategory:
        validate_non_empty_string(category_data.name, "name")

        db_category = RoomCategory(**category_data.model_dump())
        self.db.add(db_category)
        await self.db.commit()
        await self.db.refresh(db_category)
        logger.info(f"Room category '{db_category.name}' created")
        return db_category

    async def update(
        self, category_id: int, category_data: RoomCategoryUpdate
    ) -> RoomCategory:
        db_category = await self.get_by_id(category_id)
        db_category = ensure_exists(db_category, "Room category", category_id)

        update_data = category_data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            if value is not None:
                setattr(db_category, field, value)

        await self.db.commit()
        await self.db.refresh(db_category)
        return db_category

    async def delete(self, category_id: int) -> bool:
        db_category = await self.get_by_id(category_id)
        db_category = ensure_exists(db_category, "Room category", category_id)

        rooms_count_stmt = select(func.count(Room.id)).where(
            Room.category_id == category_id
        )
        rooms_count = (await self.db.execute(rooms_count_stmt)).scalar()
        ensure_no_related_records(rooms_count or 0, "room category", "rooms")

        await self.db.delete(db_category)
        await self.db.commit()
        logger.info(f"Room category {category_id} deleted")
        return True


class RoomService:
    def __init__(self, db: AsyncSession, locks: Optional[KeyedLock] = None):
        self.db = db
        self.locks = locks or KeyedLock()

    async def get_all(
        self,
        category_id: Optional[int] = None,
        status: Optional[RoomStatus] = None,
    ) -> List[Room]:
        stmt = (
            select(Room).options(selectinload(Room.category)).order_by(Room.room_number)
        )
        if category_id is not None:
            stmt = stmt.where(Room.category_id == category_id)
        if status is not None:
            stmt = stmt.where(Room.status == status)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, room_id: int) -> Optional[Room]:
        stmt = (
            select(Room)
            .options(selectinload(Room.category))
            .where(Room.id == room_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_number(self, room_number: str) -> Optional[Room]:
        stmt = select(Room).where(Room.room_number == room_number)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _ensure_category(self, category_id: int) -> RoomCategory:
        category = await self.db.get(RoomCategory, category_id)
        if category is None:
            raise RoomCategoryNotFound(category_id)
        return category

    async def create(self, room_data: RoomCreate) -> Room:
        room_number = validate_non_empty_string(room_data.room_number, "room_number")
        validate_unique_field(
            await self.get_by_number(room_number), "room number", "Room"
        )
        await self._ensure_category(room_data.category_id)

        db_room = Room(**room_data.model_dump(exclude={"room_number"}))
        db_room.room_number = room_number
        self.db.add(db_room)
        await self.db.commit()
        logger.info(f"Room {room_number} created")

        # Eagerly load the category to avoid lazy loading during serialization
        return await self.get_by_id(db_room.id)

    async def update(self, room_id: int, room_data: RoomUpdate) -> Room:
        """
        Update a room.

        A requested status is resolved against the bookings holding the room:
        maintenance sticks unless a guest is checked in, and any other request
        falls back to the status those bookings imply.
        """
        async with self.locks.hold(room_key(room_id)):
            db_room = await self.get_by_id(room_id)
            if db_room is None:
                raise RoomNotFound(room_id)

            update_data = {
                field: value
                for field, value in room_data.model_dump(exclude_unset=True).items()
                if value is not None or field == "notes"
            }

            if "room_number" in update_data:
                room_number = validate_non_empty_string(
                    update_data["room_number"], "room_number"
                )
                if room_number != db_room.room_number:
                    validate_unique_field(
                        await self.get_by_number(room_number), "room number", "Room"
                    )
                update_data["room_number"] = room_number
            if "category_id" in update_data:
                await self._ensure_category(update_data["category_id"])

            if "status" in update_data:
                requested = update_data["status"]
                derived = await derived_room_status(self.db, room_id)
                status = resolve_room_status(requested, derived)
                if status != requested:
                    logger.info(
                        f"Room {db_room.room_number}: staff asked for "
                        f"{requested.value}, bookings keep it {status.value}"
                    )
                elif status != db_room.status:
                    logger.info(
                        f"Room {db_room.room_number} status set to {status.value} by staff"
                    )
                update_data["status"] = status

            for field, value in update_data.items():
                setattr(db_room, field, value)

            await self.db.commit()
        return await self.get_by_id(room_id)

    async def delete(self, room_id: int) -> bool:
        db_room = await self.get_by_id(room_id)
        if db_room is None:
            raise RoomNotFound(room_id)

        bookings_count_stmt = select(func.count(Booking.id)).where(
            Booking.room_id == room_id
        )
        bookings_count = (await self.db.execute(bookings_count_stmt)).scalar()
        ensure_no_related_records(bookings_count or 0, "room", "bookings")

        await self.db.delete(db_room)
        await self.db.commit()
        logger.info(f"Room {db_room.room_number} deleted")
        return True
