from typing import List

from fastapi import APIRouter

from hotelx.core.common_deps import RoomCategoryServiceDep, StaffUserDep
from hotelx.core.exceptions import RoomCategoryNotFound
from hotelx.schemas.responses import MessageResponse
from hotelx.schemas.room import RoomCategory, RoomCategoryCreate, RoomCategoryUpdate

router = APIRouter()


@router.get("/", response_model=List[RoomCategory])
async def get_room_categories(service: RoomCategoryServiceDep):
    return await service.get_all()


@router.get("/{category_id}", response_model=RoomCategory)
async def get_room_category(category_id: int, service: RoomCategoryServiceDep):
    category = await service.get_by_id(category_id)
    if category is None:
        raise RoomCategoryNotFound(category_id)
    return category


@router.post("/", response_model=RoomCategory, status_code=201)
async def create_room_category(
    category_data: RoomCategoryCreate,
    service: RoomCategoryServiceDep,
    current_user: StaffUserDep,
):
    return await service.create(category_data)


@router.put("/{category_id}", response_model=RoomCategory)
async def update_room_category(
    category_id: int,
    category_data: RoomCategoryUpdate,
    service: RoomCategoryServiceDep,
    current_user: StaffUserDep,
):
    return await service.update(category_id, category_data)


@router.delete("/{category_id}", response_model=MessageResponse)
async def delete_room_category(
    category_id: int,
    service: RoomCategoryServiceDep,
    current_user: StaffUserDep,
):
    await service.delete(category_id)
    return MessageResponse(message="Room category deleted successfully")
