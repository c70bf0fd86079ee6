from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from hotelx.models.room import MANUAL_ROOM_STATUSES, RoomStatus


def _check_manual_status(value: Optional[RoomStatus]) -> Optional[RoomStatus]:
    if value is not None and value not in MANUAL_ROOM_STATUSES:
        raise ValueError(
            "status can only be set to 'available' or 'maintenance'; "
            "'reserved' and 'occupied' follow bookings"
        )
    return value


class RoomCategoryBase(BaseModel):
    name: str
    description: Optional[str] = None
    base_price: Decimal = Field(ge=0, description="Nightly price must be non-negative")
    capacity: int = Field(gt=0, description="Capacity must be greater than 0")


class RoomCategoryCreate(RoomCategoryBase):
    pass


class RoomCategoryUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    base_price: Optional[Decimal] = Field(None, ge=0)
    capacity: Optional[int] = Field(None, gt=0)


class RoomCategory(RoomCategoryBase):
    id: int
    created_at: datetime

    class Config:
        from_attributes = True


class RoomBase(BaseModel):
    room_number: str
    category_id: int
    floor: int = 1
    has_wifi: bool = True
    has_ac: bool = True
    has_minibar: bool = False
    has_room_service: bool = False
    has_tv: bool = True
    has_balcony: bool = False
    notes: Optional[str] = None


class RoomCreate(RoomBase):
    status: RoomStatus = RoomStatus.AVAILABLE

    @field_validator("status")
    @classmethod
    def check_manual_status(cls, v):
        return _check_manual_status(v)


class RoomUpdate(BaseModel):
    room_number: Optional[str] = None
    category_id: Optional[int] = None
    status: Optional[RoomStatus] = None
    floor: Optional[int] = None
    has_wifi: Optional[bool] = None
    has_ac: Optional[bool] = None
    has_minibar: Optional[bool] = None
    has_room_service: Optional[bool] = None
    has_tv: Optional[bool] = None
    has_balcony: Optional[bool] = None
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def check_manual_status(cls, v):
        return _check_manual_status(v)


class Room(RoomBase):
    id: int
    status: RoomStatus
    created_at: datetime

    class Config:
        from_attributes = True


class RoomWithCategory(Room):
    category: RoomCategory


class RoomAvailabilityResponse(BaseModel):
    room_id: int
    check_in_date: str
    check_out_date: str
    is_available: bool
