"""
Common dependencies for the operations API.

This module provides convenient access to commonly used dependencies,
reducing boilerplate code in endpoint functions.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hotelx.core.auth_deps import RequireActiveUser, RequireStaffRole
from hotelx.core.database import get_db
from hotelx.core.service_deps import (
    GetAuthService,
    GetAvailabilityService,
    GetBookingService,
    GetGuestService,
    GetPaymentGateway,
    GetPaymentService,
    GetRoomCategoryService,
    GetRoomService,
    GetStatsService,
)

# Database dependencies
DatabaseDep = Annotated[AsyncSession, Depends(get_db)]

# Commonly used type aliases for endpoint signatures
CurrentUserDep = RequireActiveUser
StaffUserDep = RequireStaffRole

# Service type aliases for cleaner endpoint signatures
AuthServiceDep = GetAuthService
AvailabilityServiceDep = GetAvailabilityService
RoomCategoryServiceDep = GetRoomCategoryService
RoomServiceDep = GetRoomService
GuestServiceDep = GetGuestService
BookingServiceDep = GetBookingService
PaymentServiceDep = GetPaymentService
StatsServiceDep = GetStatsService
PaymentGatewayDep = GetPaymentGateway
