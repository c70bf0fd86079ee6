from typing import List, Optional

from fastapi import APIRouter, Query

from hotelx.core.common_deps import BookingServiceDep, CurrentUserDep, StaffUserDep
from hotelx.core.exceptions import BookingNotFound
from hotelx.models.booking import BookingStatus
from hotelx.schemas.booking import (
    BookingCancel,
    BookingCreate,
    BookingUpdate,
    BookingWithDetails,
)
from hotelx.schemas.responses import MessageResponse

router = APIRouter()


# Basic CRUD operations
@router.get("/", response_model=List[BookingWithDetails])
async def get_bookings(
    service: BookingServiceDep,
    current_user: CurrentUserDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    status: Optional[BookingStatus] = Query(
        None, description="Filter by booking status"
    ),
):
    """Get list of bookings with guest, room and latest payment"""
    return await service.get_all_with_details(skip, limit, status)


@router.post("/", response_model=BookingWithDetails, status_code=201)
async def create_booking(
    booking_data: BookingCreate,
    service: BookingServiceDep,
    current_user: StaffUserDep,
):
    """Create a new booking; the room must be free for the whole stay"""
    return await service.create(booking_data)


@router.get("/number/{booking_number}", response_model=BookingWithDetails)
async def get_booking_by_number(
    booking_number: str,
    service: BookingServiceDep,
    current_user: CurrentUserDep,
):
    booking = await service.get_by_number(booking_number)
    if not booking:
        raise BookingNotFound()
    return booking


@router.get("/{booking_id}", response_model=BookingWithDetails)
async def get_booking(
    booking_id: int,
    service: BookingServiceDep,
    current_user: CurrentUserDep,
):
    """Get booking details with guest and room information"""
    booking = await service.get_with_details(booking_id)
    if not booking:
        raise BookingNotFound(booking_id)
    return booking


@router.put("/{booking_id}", response_model=BookingWithDetails)
async def update_booking(
    booking_id: int,
    booking_data: BookingUpdate,
    service: BookingServiceDep,
    current_user: StaffUserDep,
):
    return await service.update(booking_id, booking_data)


@router.delete("/{booking_id}", response_model=MessageResponse)
async def delete_booking(
    booking_id: int,
    service: BookingServiceDep,
    current_user: StaffUserDep,
):
    await service.delete(booking_id)
    return MessageResponse(message="Booking deleted successfully")


# Lifecycle operations
@router.post("/{booking_id}/checkin", response_model=BookingWithDetails)
async def check_in_booking(
    booking_id: int,
    service: BookingServiceDep,
    current_user: StaffUserDep,
):
    return await service.check_in(booking_id)


@router.post("/{booking_id}/checkout", response_model=BookingWithDetails)
async def check_out_booking(
    booking_id: int,
    service: BookingServiceDep,
    current_user: StaffUserDep,
):
    return await service.check_out(booking_id)


@router.post("/{booking_id}/cancel", response_model=BookingWithDetails)
async def cancel_booking(
    booking_id: int,
    service: BookingServiceDep,
    current_user: StaffUserDep,
    cancel_data: Optional[BookingCancel] = None,
):
    reason = cancel_data.reason if cancel_data else None
    return await service.cancel(booking_id, reason)
