"""
Common response schemas for API endpoints.

This module defines Pydantic models for endpoints that would otherwise
return raw dictionaries, keeping the Swagger documentation explicit.
"""

from decimal import Decimal
from typing import Dict

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Standard response for operations that return a success message."""

    message: str = Field(
        ...,
        description="Success message describing the completed operation",
        examples=["Resource deleted successfully"],
    )


class UserRegistrationResponse(BaseModel):
    """Response schema for user registration endpoint."""

    message: str = Field(..., examples=["User created successfully"])
    user_id: int = Field(..., description="ID of the newly created user", examples=[3])


class CurrentUserResponse(BaseModel):
    """Response schema for /auth/me endpoint."""

    id: int = Field(..., description="User ID", examples=[1])
    username: str = Field(..., description="Username", examples=["frontdesk"])
    email: str = Field(..., description="User email address")
    role: str = Field(..., description="User role (viewer, staff)", examples=["staff"])
    is_active: bool = Field(..., description="Whether the user account is active")


class DashboardStats(BaseModel):
    """Aggregates shown on the staff dashboard."""

    total_bookings: int = Field(..., description="Number of bookings", examples=[42])
    revenue: Decimal = Field(
        ..., description="Sum of all paid payment amounts", examples=["12500.00"]
    )
    occupancy_rate: float = Field(
        ...,
        description="Occupied rooms as a percentage of all rooms (0-100)",
        examples=[62.5],
    )
    pending_payments: int = Field(
        ..., description="Number of payments still unpaid", examples=[3]
    )
    total_rooms: int = Field(..., description="Number of rooms", examples=[8])
    rooms_by_status: Dict[str, int] = Field(
        ..., description="Room counts keyed by room status"
    )


class WebhookAck(BaseModel):
    """Acknowledgement returned to the payment gateway for every callback."""

    received: bool = True
    processed: bool = Field(
        ..., description="Whether the event changed a payment record"
    )
