from decimal import Decimal
from typing import Dict

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hotelx.models.booking import Booking
from hotelx.models.payment import Payment, PaymentStatus
from hotelx.models.room import Room, RoomStatus


class StatsService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_dashboard_stats(self) -> Dict:
        """Headline numbers for the staff dashboard"""
        total_bookings = (
            await self.db.execute(select(func.count(Booking.id)))
        ).scalar() or 0

        revenue_stmt = select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.status == PaymentStatus.PAID
        )
        revenue = (await self.db.execute(revenue_stmt)).scalar() or 0

        pending_stmt = select(func.count(Payment.id)).where(
            Payment.status == PaymentStatus.UNPAID
        )
        pending_payments = (await self.db.execute(pending_stmt)).scalar() or 0

        # Get room status breakdown
        status_stmt = select(Room.status, func.count(Room.id).label("count")).group_by(
            Room.status
        )
        status_result = await self.db.execute(status_stmt)
        rooms_by_status = {status.value: 0 for status in RoomStatus}
        rooms_by_status.update({row.status.value: row.count for row in status_result.all()})

        total_rooms = sum(rooms_by_status.values())
        occupied = rooms_by_status[RoomStatus.OCCUPIED.value]
        occupancy_rate = round(occupied / total_rooms * 100, 1) if total_rooms else 0.0

        return {
            "total_bookings": total_bookings,
            "revenue": Decimal(str(revenue)).quantize(Decimal("0.01")),
            "occupancy_rate": occupancy_rate,
            "pending_payments": pending_payments,
            "total_rooms": total_rooms,
            "rooms_by_status": rooms_by_status,
        }
