from fastapi import APIRouter

from hotelx.api.v1.endpoints import (
    auth,
    bookings,
    guests,
    payments,
    room_categories,
    rooms,
    stats,
    webhooks,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(
    room_categories.router, prefix="/room-categories", tags=["room-categories"]
)
api_router.include_router(rooms.router, prefix="/rooms", tags=["rooms"])
api_router.include_router(guests.router, prefix="/guests", tags=["guests"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])
api_router.include_router(stats.router, prefix="/stats", tags=["stats"])
