from .booking import (
    Booking,
    BookingCancel,
    BookingCreate,
    BookingUpdate,
    BookingWithDetails,
)
from .guest import Guest, GuestCreate, GuestUpdate
from .payment import (
    CardPaymentRequest,
    CardPaymentResponse,
    InvoicePaymentRequest,
    InvoicePaymentResponse,
    Payment,
    PaymentCreate,
    PaymentUpdate,
    PaymentWithDetails,
)
from .room import (
    Room,
    RoomAvailabilityResponse,
    RoomCategory,
    RoomCategoryCreate,
    RoomCategoryUpdate,
    RoomCreate,
    RoomUpdate,
    RoomWithCategory,
)
from .user import LoginRequest, Token, User, UserCreate

__all__ = [
    # User schemas
    "User", "UserCreate", "LoginRequest", "Token",
    # Room schemas
    "RoomCategory", "RoomCategoryCreate", "RoomCategoryUpdate",
    "Room", "RoomCreate", "RoomUpdate", "RoomWithCategory", "RoomAvailabilityResponse",
    # Guest schemas
    "Guest", "GuestCreate", "GuestUpdate",
    # Booking schemas
    "Booking", "BookingCancel", "BookingCreate", "BookingUpdate", "BookingWithDetails",
    # Payment schemas
    "Payment", "PaymentCreate", "PaymentUpdate", "PaymentWithDetails",
    "CardPaymentRequest", "CardPaymentResponse",
    "InvoicePaymentRequest", "InvoicePaymentResponse",
]
