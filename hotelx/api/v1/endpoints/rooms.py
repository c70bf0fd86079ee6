from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Query

from hotelx.core.common_deps import (
    AvailabilityServiceDep,
    RoomServiceDep,
    StaffUserDep,
)
from hotelx.core.exceptions import RoomNotFound
from hotelx.models.room import RoomStatus
from hotelx.schemas.responses import MessageResponse
from hotelx.schemas.room import (
    RoomAvailabilityResponse,
    RoomCreate,
    RoomUpdate,
    RoomWithCategory,
)

router = APIRouter()


@router.get("/", response_model=List[RoomWithCategory])
async def get_rooms(
    service: RoomServiceDep,
    category_id: Optional[int] = Query(None, description="Filter by room category ID"),
    status: Optional[RoomStatus] = Query(None, description="Filter by room status"),
):
    return await service.get_all(category_id=category_id, status=status)


# Declared before /{room_id} so "available" is not parsed as an id
@router.get("/available", response_model=List[RoomWithCategory])
async def get_available_rooms(
    service: AvailabilityServiceDep,
    check_in: date = Query(..., alias="checkIn", description="First night (YYYY-MM-DD)"),
    check_out: date = Query(
        ..., alias="checkOut", description="Departure day, exclusive (YYYY-MM-DD)"
    ),
    category_id: Optional[int] = Query(None, alias="categoryId"),
):
    """Rooms that can take a new booking for the whole stay"""
    return await service.find_available_rooms(check_in, check_out, category_id)


@router.get("/{room_id}", response_model=RoomWithCategory)
async def get_room(room_id: int, service: RoomServiceDep):
    room = await service.get_by_id(room_id)
    if room is None:
        raise RoomNotFound(room_id)
    return room


@router.get("/{room_id}/availability", response_model=RoomAvailabilityResponse)
async def check_room_availability(
    room_id: int,
    service: AvailabilityServiceDep,
    check_in: date = Query(..., alias="checkIn"),
    check_out: date = Query(..., alias="checkOut"),
):
    is_available = await service.is_room_available(room_id, check_in, check_out)
    return RoomAvailabilityResponse(
        room_id=room_id,
        check_in_date=check_in.isoformat(),
        check_out_date=check_out.isoformat(),
        is_available=is_available,
    )


@router.post("/", response_model=RoomWithCategory, status_code=201)
async def create_room(
    room_data: RoomCreate,
    service: RoomServiceDep,
    current_user: StaffUserDep,
):
    return await service.create(room_data)


@router.put("/{room_id}", response_model=RoomWithCategory)
async def update_room(
    room_id: int,
    room_data: RoomUpdate,
    service: RoomServiceDep,
    current_user: StaffUserDep,
):
    return await service.update(room_id, room_data)


@router.delete("/{room_id}", response_model=MessageResponse)
async def delete_room(
    room_id: int,
    service: RoomServiceDep,
    current_user: StaffUserDep,
):
    await service.delete(room_id)
    return MessageResponse(message="Room deleted successfully")
