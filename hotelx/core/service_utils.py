"""
Service layer utility functions.

Centralized helpers for the checks every service repeats: entity existence,
role gates, and field-level validation.
"""

from typing import Any, Optional, TypeVar

from hotelx.core.exceptions import (
    AccessDeniedError,
    ConflictError,
    EntityNotFoundError,
    InactiveUserError,
    ValidationError,
)
from hotelx.models.user import User, UserRole

T = TypeVar("T")


def ensure_exists(
    entity: Optional[T],
    entity_name: str,
    entity_id: Optional[int] = None,
) -> T:
    """
    Ensure an entity exists, raising EntityNotFoundError if it doesn't.

    Args:
        entity: The entity to check (can be None)
        entity_name: Human-readable name of the entity type (e.g., "Guest")
        entity_id: Optional ID of the entity for more specific error messages

    Returns:
        The entity if it exists

    Raises:
        EntityNotFoundError: If the entity is None
    """
    if entity is None:
        raise EntityNotFoundError(entity_name, entity_id)
    return entity


def ensure_staff_access(user: User) -> User:
    """
    Ensure user has staff role access.

    Raises:
        AccessDeniedError: If user doesn't have staff role
        InactiveUserError: If user is inactive
    """
    if not user.is_active:
        raise InactiveUserError()

    if user.role != UserRole.STAFF:
        raise AccessDeniedError("Staff", user.role.value)

    return user


def ensure_active_user(user: User) -> User:
    """
    Ensure user is active.

    Raises:
        InactiveUserError: If user is inactive
    """
    if not user.is_active:
        raise InactiveUserError()
    return user


def ensure_no_related_records(
    count: int, entity_name: str, related_entity: str
) -> None:
    """
    Ensure no related records exist before deletion.

    Raises:
        ConflictError: If related records exist
    """
    if count > 0:
        raise ConflictError(
            f"Cannot delete {entity_name} with existing {related_entity}",
            related_entity,
        )


def validate_unique_field(
    existing_entity: Optional[Any], field_name: str, entity_name: str
) -> None:
    """
    Validate that a field value is unique.

    Raises:
        ConflictError: If field value is not unique
    """
    if existing_entity:
        raise ConflictError(
            f"{entity_name} with this {field_name} already exists", entity_name
        )


def validate_non_empty_string(value: Optional[str], field_name: str) -> str:
    """
    Validate that a string value is not None or empty.

    Raises:
        ValidationError: If value is None or empty
    """
    if not value or not value.strip():
        raise ValidationError(f"{field_name} cannot be empty", field_name, value)
    return value.strip()
