"""
HTTP rendering of domain and framework errors.

Every error body carries ``detail`` and ``error_type``, plus ``details`` when the
exception has any. Most domain errors only differ by status code and are listed
in ``DOMAIN_ERROR_STATUSES``.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from hotelx.core.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    BusinessRuleViolationError,
    ConflictError,
    DomainException,
    EntityNotFoundError,
    InactiveUserError,
    PaymentGatewayError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def create_error_response(
    status_code: int,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    error_type: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Create a standardized error response."""
    content = {
        "detail": message,
    }

    if error_type:
        content["error_type"] = error_type

    if details:
        content["details"] = jsonable_encoder(details)

    return JSONResponse(status_code=status_code, content=content, headers=headers)


# Domain errors that map straight onto a status code: (status, error_type, log level)
DOMAIN_ERROR_STATUSES = {
    EntityNotFoundError: (status.HTTP_404_NOT_FOUND, "entity_not_found", logging.INFO),
    AccessDeniedError: (status.HTTP_403_FORBIDDEN, "access_denied", logging.WARNING),
    InactiveUserError: (status.HTTP_403_FORBIDDEN, "inactive_user", logging.WARNING),
    ValidationError: (status.HTTP_400_BAD_REQUEST, "validation_error", logging.WARNING),
    ConflictError: (status.HTTP_409_CONFLICT, "conflict_error", logging.WARNING),
    BusinessRuleViolationError: (
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "business_rule_violation",
        logging.WARNING,
    ),
    PaymentGatewayError: (status.HTTP_400_BAD_REQUEST, "payment_failed", logging.WARNING),
}


def domain_error_handler(status_code: int, error_type: str, level: int):
    """Build a handler that logs ``exc`` and renders it with ``status_code``."""

    async def handler(request: Request, exc: DomainException) -> JSONResponse:
        logger.log(
            level, f"{error_type} on {request.method} {request.url.path}: {exc.message}"
        )
        return create_error_response(
            status_code=status_code,
            message=exc.message,
            details=exc.details,
            error_type=error_type,
        )

    return handler


async def authentication_error_handler(
    request: Request, exc: AuthenticationError
) -> JSONResponse:
    """Handle AuthenticationError exceptions."""
    logger.info(f"Authentication failed for {request.url}: {exc.message}")

    return create_error_response(
        status_code=status.HTTP_401_UNAUTHORIZED,
        message=exc.message,
        error_type="not_authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def domain_exception_handler(
    request: Request, exc: DomainException
) -> JSONResponse:
    """Handle generic DomainException exceptions."""
    logger.error(f"Unhandled domain exception: {exc.message}")

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="An internal error occurred",
        error_type="domain_error",
    )


async def integrity_error_handler(
    request: Request, exc: IntegrityError
) -> JSONResponse:
    """Handle SQLAlchemy IntegrityError exceptions."""
    logger.error(f"Database integrity error: {str(exc)}")

    error_message = "Database constraint violation"
    if "unique constraint" in str(exc).lower():
        error_message = "A record with this value already exists"
    elif "foreign key constraint" in str(exc).lower():
        error_message = "Referenced record does not exist"
    elif "not null constraint" in str(exc).lower():
        error_message = "Required field is missing"

    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message=error_message,
        error_type="integrity_error",
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI request validation errors."""
    logger.warning(f"Request validation error: {exc.errors()}")

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="Request validation failed",
        details={"validation_errors": exc.errors()},
        error_type="request_validation_error",
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle anything that escaped the domain layer."""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}")

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="An internal error occurred",
        error_type="internal_error",
    )


# Exception handler mapping
EXCEPTION_HANDLERS = {
    **{
        exc_class: domain_error_handler(*mapping)
        for exc_class, mapping in DOMAIN_ERROR_STATUSES.items()
    },
    AuthenticationError: authentication_error_handler,
    DomainException: domain_exception_handler,
    IntegrityError: integrity_error_handler,
    RequestValidationError: request_validation_error_handler,
    Exception: unhandled_exception_handler,
}
