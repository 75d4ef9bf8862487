"""Custom exception hierarchy and handlers."""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    status_code = 400
    code = "app_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundException(AppException):
    """Raised when entity is not found."""

    status_code = 404
    code = "not_found"


class ConflictException(AppException):
    """Raised when entity conflicts with current state."""

    status_code = 409
    code = "conflict"


class UnauthorizedException(AppException):
    """Raised when caller has no rights for operation."""

    status_code = 403
    code = "unauthorized"


class BusinessRuleException(AppException):
    """Raised when business rule validation fails."""

    status_code = 422
    code = "business_rule_violation"


class BookingDisabledException(ConflictException):
    """Raised when booking is switched off globally."""

    code = "booking_disabled"


class AdvisorUnavailableException(ConflictException):
    """Raised when the advisor's own availability blocks booking."""

    code = "advisor_unavailable"


class SlotTakenException(ConflictException):
    """Raised when the advisor already has a live session at the slot."""

    code = "slot_taken"


class InvalidTransitionException(ConflictException):
    """Raised when a lifecycle transition is not allowed from current status."""

    code = "invalid_transition"


class InvalidSlotException(BusinessRuleException):
    """Raised when start time is not one of the bookable slots."""

    code = "invalid_slot"


class MissingReasonException(BusinessRuleException):
    """Raised when a cancellation has no reason."""

    code = "missing_reason"


class StoreFailureException(AppException):
    """Raised when the store rejects a write after validation passed."""

    status_code = 503
    code = "store_failure"


async def app_exception_handler(_: Request, exc: AppException) -> JSONResponse:
    """Handle custom domain exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": exc.code, "message": exc.message}},
    )


async def http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTP exceptions in unified shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": "http_error", "message": str(exc.detail)}},
        headers=getattr(exc, "headers", None),
    )


async def store_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Surface store errors as store_failure instead of pretending success."""
    logger.exception("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return await app_exception_handler(request, StoreFailureException("Store operation failed"))


async def unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"error": {"code": "internal_error", "message": "Internal server error"}},
    )


def register_exception_handlers(app) -> None:
    """Register global exception handlers."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, store_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
