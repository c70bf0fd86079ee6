"""
Domain exceptions for the hotel operations ledger.

These exceptions represent business domain errors and are converted to HTTP responses
by the exception handler middleware. This separates business logic concerns from HTTP concerns.
"""

from datetime import date
from typing import Optional


class DomainException(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class EntityNotFoundError(DomainException):
    """Raised when a requested entity is not found in the database."""

    def __init__(
        self,
        entity_name: str,
        entity_id: Optional[int] = None,
        field_name: Optional[str] = None,
    ):
        self.entity_name = entity_name
        self.entity_id = entity_id
        self.field_name = field_name

        if entity_id:
            message = f"{entity_name} with id {entity_id} not found"
        else:
            message = f"{entity_name} not found"

        super().__init__(message, {"entity_name": entity_name, "entity_id": entity_id})


class RoomCategoryNotFound(EntityNotFoundError):
    def __init__(self, category_id: Optional[int] = None):
        super().__init__("Room category", category_id)


class RoomNotFound(EntityNotFoundError):
    def __init__(self, room_id: Optional[int] = None):
        super().__init__("Room", room_id)


class GuestNotFound(EntityNotFoundError):
    def __init__(self, guest_id: Optional[int] = None):
        super().__init__("Guest", guest_id)


class BookingNotFound(EntityNotFoundError):
    def __init__(self, booking_id: Optional[int] = None):
        super().__init__("Booking", booking_id)


class PaymentNotFound(EntityNotFoundError):
    def __init__(self, payment_id: Optional[int] = None):
        super().__init__("Payment", payment_id)


class AccessDeniedError(DomainException):
    """Raised when user lacks required permissions for an operation."""

    def __init__(self, required_role: str, current_role: Optional[str] = None):
        self.required_role = required_role
        self.current_role = current_role

        message = f"{required_role} role required"
        if current_role:
            message += f", but current role is {current_role}"

        super().__init__(
            message, {"required_role": required_role, "current_role": current_role}
        )


class AuthenticationError(DomainException):
    """Raised when credentials or a bearer token cannot be verified."""

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message)


class ValidationError(DomainException):
    """Raised when business rule validation fails."""

    def __init__(
        self, message: str, field: Optional[str] = None, value: Optional[str] = None
    ):
        self.field = field
        self.value = value
        super().__init__(message, {"field": field, "value": value})


class InvalidDateRange(ValidationError):
    """Raised when a stay does not end strictly after it starts."""

    def __init__(self, check_in: date, check_out: date):
        self.check_in = check_in
        self.check_out = check_out
        super().__init__(
            "check_out_date must be after check_in_date",
            "check_out_date",
            f"{check_out} (check_in: {check_in})",
        )


class ConflictError(DomainException):
    """Raised when an operation conflicts with existing data or business rules."""

    def __init__(self, message: str, conflicting_entity: Optional[str] = None):
        self.conflicting_entity = conflicting_entity
        super().__init__(message, {"conflicting_entity": conflicting_entity})


class RoomAlreadyBooked(ConflictError):
    """Raised when a room already has a non-cancelled booking overlapping the stay."""

    def __init__(self, room_id: int, check_in: date, check_out: date):
        self.room_id = room_id
        super().__init__(
            f"Room {room_id} is already booked between {check_in} and {check_out}",
            "Booking",
        )
        self.details.update(
            {
                "room_id": room_id,
                "check_in_date": check_in.isoformat(),
                "check_out_date": check_out.isoformat(),
            }
        )


class RoomUnavailable(ConflictError):
    """Raised when a room is out of service and cannot take bookings."""

    def __init__(self, room_id: int, status: str):
        self.room_id = room_id
        super().__init__(f"Room {room_id} is not bookable (status: {status})", "Room")
        self.details.update({"room_id": room_id, "status": status})


class BusinessRuleViolationError(DomainException):
    """Raised when a business rule is violated."""

    def __init__(self, rule_name: str, message: str, context: Optional[dict] = None):
        self.rule_name = rule_name
        super().__init__(message, {"rule_name": rule_name, **(context or {})})


class InvalidStatusTransition(BusinessRuleViolationError):
    """Raised when a booking or payment status change is not allowed."""

    def __init__(self, entity_name: str, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            "status_transition",
            f"{entity_name} cannot move from '{current}' to '{requested}'",
            {"entity_name": entity_name, "current": current, "requested": requested},
        )


class PaymentGatewayError(DomainException):
    """Raised after a gateway failure has been recorded as a failed payment."""

    def __init__(self, message: str, payment_id: Optional[int] = None):
        self.payment_id = payment_id
        super().__init__(message, {"payment_id": payment_id})


class InactiveUserError(DomainException):
    """Raised when an inactive user attempts to perform operations."""

    def __init__(self):
        super().__init__("User account is inactive")
