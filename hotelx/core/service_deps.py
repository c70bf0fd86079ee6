"""
Service dependency injection utilities.

This module provides centralized service instantiation through dependency injection,
eliminating the repeated pattern of manually creating service instances in endpoints.
Services that serialize ledger writes also receive the application's lock registry,
and the payment service receives the application's gateway client.
"""

from typing import Annotated, Callable, Type, TypeVar

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from hotelx.core.database import get_db
from hotelx.core.locks import KeyedLock
from hotelx.services.auth_service import AuthService
from hotelx.services.availability_service import AvailabilityService
from hotelx.services.booking_service import BookingService
from hotelx.services.guest_service import GuestService
from hotelx.services.payment_service import PaymentService
from hotelx.services.room_service import RoomCategoryService, RoomService
from hotelx.services.stats_service import StatsService
from hotelx.services.xendit_client import XenditClient

T = TypeVar("T")


def get_ledger_locks(request: Request) -> KeyedLock:
    return request.app.state.ledger_locks


def get_payment_gateway(request: Request) -> XenditClient:
    return request.app.state.payment_gateway


def get_service(service_class: Type[T]) -> Callable[[AsyncSession], T]:
    """
    Generic service dependency factory.

    Creates a dependency function that instantiates a service with a database session.

    Args:
        service_class: The service class to instantiate

    Returns:
        A dependency function that creates service instances
    """

    def dependency(db: AsyncSession = Depends(get_db)) -> T:
        return service_class(db)

    return dependency


def get_locked_service(service_class: Type[T]) -> Callable[..., T]:
    """Like get_service, for services that also take the ledger lock registry."""

    def dependency(
        db: AsyncSession = Depends(get_db),
        locks: KeyedLock = Depends(get_ledger_locks),
    ) -> T:
        return service_class(db, locks)

    return dependency


def get_payment_service(
    db: AsyncSession = Depends(get_db),
    locks: KeyedLock = Depends(get_ledger_locks),
    gateway: XenditClient = Depends(get_payment_gateway),
) -> PaymentService:
    return PaymentService(db, locks, gateway)


# Pre-configured service dependencies
GetAuthService = Annotated[AuthService, Depends(get_service(AuthService))]
GetAvailabilityService = Annotated[
    AvailabilityService, Depends(get_service(AvailabilityService))
]
GetRoomCategoryService = Annotated[
    RoomCategoryService, Depends(get_service(RoomCategoryService))
]
GetRoomService = Annotated[RoomService, Depends(get_locked_service(RoomService))]
GetGuestService = Annotated[GuestService, Depends(get_service(GuestService))]
GetBookingService = Annotated[
    BookingService, Depends(get_locked_service(BookingService))
]
GetPaymentService = Annotated[PaymentService, Depends(get_payment_service)]
GetStatsService = Annotated[StatsService, Depends(get_service(StatsService))]
GetPaymentGateway = Annotated[XenditClient, Depends(get_payment_gateway)]
