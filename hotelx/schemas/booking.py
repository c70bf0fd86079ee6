from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from hotelx.models.booking import BookingStatus
from hotelx.schemas.guest import Guest
from hotelx.schemas.payment import Payment
from hotelx.schemas.room import RoomWithCategory


class BookingBase(BaseModel):
    guest_id: int
    room_id: int
    check_in_date: date
    check_out_date: date
    adults: int = Field(1, ge=1, description="At least one adult is required")
    children: int = Field(0, ge=0)
    special_requests: Optional[str] = None


class BookingCreate(BookingBase):
    # Defaults to category base price x nights
    total_price: Optional[Decimal] = Field(None, ge=0)


class BookingUpdate(BaseModel):
    guest_id: Optional[int] = None
    room_id: Optional[int] = None
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None
    adults: Optional[int] = Field(None, ge=1)
    children: Optional[int] = Field(None, ge=0)
    status: Optional[BookingStatus] = None
    total_price: Optional[Decimal] = Field(None, ge=0)
    special_requests: Optional[str] = None


class Booking(BookingBase):
    id: int
    booking_number: str
    status: BookingStatus
    total_price: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BookingWithDetails(Booking):
    """Booking with guest, room (and its category) and latest payment"""

    guest: Guest
    room: RoomWithCategory
    payment: Optional[Payment] = None


class BookingCancel(BaseModel):
    reason: Optional[str] = Field(None, description="Appended to special requests")
