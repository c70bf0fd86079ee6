from hotelx.models.booking import Booking, BookingStatus
from hotelx.models.guest import Guest
from hotelx.models.payment import Payment, PaymentMethod, PaymentStatus
from hotelx.models.room import MANUAL_ROOM_STATUSES, Room, RoomCategory, RoomStatus
from hotelx.models.user import User, UserRole

__all__ = [
    "Room",
    "RoomCategory",
    "RoomStatus",
    "MANUAL_ROOM_STATUSES",
    "User",
    "UserRole",
    "Guest",
    "Booking",
    "BookingStatus",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
]
