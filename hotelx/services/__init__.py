from .auth_service import AuthService
from .availability_service import AvailabilityService
from .booking_service import BookingService
from .guest_service import GuestService
from .payment_service import PaymentService
from .room_service import RoomCategoryService, RoomService
from .stats_service import StatsService

__all__ = [
    "AuthService",
    "AvailabilityService",
    "BookingService",
    "GuestService",
    "PaymentService",
    "RoomCategoryService",
    "RoomService",
    "StatsService",
]
