from typing import List, Optional

from fastapi import APIRouter, Query

from hotelx.core.common_deps import CurrentUserDep, GuestServiceDep, StaffUserDep
from hotelx.core.exceptions import GuestNotFound
from hotelx.schemas.guest import Guest, GuestCreate, GuestUpdate
from hotelx.schemas.responses import MessageResponse

router = APIRouter()


@router.get("/", response_model=List[Guest])
async def get_guests(
    service: GuestServiceDep,
    current_user: CurrentUserDep,
    q: Optional[str] = Query(None, description="Search by name, email or phone"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    if q:
        return await service.search(q, skip, limit)
    return await service.get_all(skip, limit)


@router.get("/{guest_id}", response_model=Guest)
async def get_guest(
    guest_id: int,
    service: GuestServiceDep,
    current_user: CurrentUserDep,
):
    guest = await service.get_by_id(guest_id)
    if guest is None:
        raise GuestNotFound(guest_id)
    return guest


@router.post("/", response_model=Guest, status_code=201)
async def create_guest(
    guest_data: GuestCreate,
    service: GuestServiceDep,
    current_user: StaffUserDep,
):
    """Register a guest, or return the guest already on file with this email"""
    return await service.create(guest_data)


@router.put("/{guest_id}", response_model=Guest)
async def update_guest(
    guest_id: int,
    guest_data: GuestUpdate,
    service: GuestServiceDep,
    current_user: StaffUserDep,
):
    return await service.update(guest_id, guest_data)


@router.delete("/{guest_id}", response_model=MessageResponse)
async def delete_guest(
    guest_id: int,
    service: GuestServiceDep,
    current_user: StaffUserDep,
):
    await service.delete(guest_id)
    return MessageResponse(message="Guest deleted successfully")
