"""
Centralized authentication dependencies.

Role gates shared by every endpoint module, so each router declares the
access it needs through a type alias instead of repeating the checks.
"""

from typing import Annotated

from fastapi import Depends

from hotelx.core.security import get_active_user
from hotelx.core.service_utils import ensure_active_user, ensure_staff_access
from hotelx.models.user import User


def require_staff_role():
    """
    Dependency that requires staff role access.

    Raises:
        AccessDeniedError: If user doesn't have staff role
        InactiveUserError: If user is inactive
    """

    def dependency(current_user: User = Depends(get_active_user)) -> User:
        return ensure_staff_access(current_user)

    return dependency


def require_active_user():
    """
    Dependency that requires an active user (any role).

    Raises:
        InactiveUserError: If user is inactive
    """

    def dependency(current_user: User = Depends(get_active_user)) -> User:
        return ensure_active_user(current_user)

    return dependency


RequireStaffRole = Annotated[User, Depends(require_staff_role())]
RequireActiveUser = Annotated[User, Depends(require_active_user())]
