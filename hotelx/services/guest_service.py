import logging
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hotelx.core.exceptions import GuestNotFound, ValidationError
from hotelx.core.service_utils import ensure_no_related_records
from hotelx.models.booking import Booking
from hotelx.models.guest import Guest
from hotelx.schemas.guest import GuestCreate, GuestUpdate

logger = logging.getLogger(__name__)


class GuestService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_all(self, skip: int = 0, limit: int = 100) -> List[Guest]:
        stmt = select(Guest).order_by(Guest.id).offset(skip).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, guest_id: int) -> Optional[Guest]:
        stmt = select(Guest).where(Guest.id == guest_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[Guest]:
        stmt = select(Guest).where(func.lower(Guest.email) == email.lower())
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def search(self, query: str, skip: int = 0, limit: int = 100) -> List[Guest]:
        """Search guests by name, phone, or email"""
        if not query:
            return await self.get_all(skip, limit)

        search_filter = or_(
            func.lower(Guest.name).contains(query.lower()),
            Guest.phone.contains(query),
            func.lower(Guest.email).contains(query.lower()),
        )

        stmt = select(Guest).where(search_filter).order_by(Guest.id).offset(skip).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create(self, guest_data: GuestCreate) -> Guest:
        """
        Register a guest.

        Email identifies a guest: registering an address that is already on
        file returns the existing record unchanged, so repeat visitors do not
        pile up duplicate profiles.
        """
        existing = await self.get_by_email(guest_data.email)
        if existing:
            logger.info(f"Guest {guest_data.email} already registered (id {existing.id})")
            return existing

        db_guest = Guest(**guest_data.model_dump())
        self.db.add(db_guest)
        await self.db.commit()
        await self.db.refresh(db_guest)
        logger.info(f"Guest {db_guest.id} registered")
        return db_guest

    async def update(self, guest_id: int, guest_data: GuestUpdate) -> Guest:
        db_guest = await self.get_by_id(guest_id)
        if db_guest is None:
            raise GuestNotFound(guest_id)

        update_data = guest_data.model_dump(exclude_unset=True)

        # Check for duplicate email if being updated
        new_email = update_data.get("email")
        if new_email and new_email.lower() != db_guest.email.lower():
            if await self.get_by_email(new_email):
                raise ValidationError(
                    "Guest with this email already exists", "email", new_email
                )

        for field, value in update_data.items():
            if value is None and field in ("name", "email", "phone"):
                continue
            setattr(db_guest, field, value)

        await self.db.commit()
        await self.db.refresh(db_guest)
        return db_guest

    async def delete(self, guest_id: int) -> bool:
        db_guest = await self.get_by_id(guest_id)
        if db_guest is None:
            raise GuestNotFound(guest_id)

        bookings_count_stmt = select(func.count(Booking.id)).where(
            Booking.guest_id == guest_id
        )
        bookings_count = (await self.db.execute(bookings_count_stmt)).scalar()
        ensure_no_related_records(bookings_count or 0, "guest", "bookings")

        await self.db.delete(db_guest)
        await self.db.commit()
        return True
