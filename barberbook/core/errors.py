# barberbook/core/errors.py
"""Scheduling error taxonomy and its HTTP rendering"""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

PERSISTENCE_DIVERGENCE = "persistence_divergence"


class SchedulingError(Exception):
    """Base class for errors surfaced to webhook callers"""

    status_code = 500
    code = "scheduling_error"
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SchedulingError):
    """A required field is missing or inconsistent"""

    status_code = 400
    code = "validation_error"


class MalformedTimestamp(ValidationError):
    """A date-time string could not be parsed"""

    code = "malformed_timestamp"


class NotFoundError(SchedulingError):
    status_code = 404
    code = "not_found"


class BarberNotFoundError(NotFoundError):
    code = "barber_not_found"


class ClientNotFoundError(NotFoundError):
    code = "client_not_found"


class EventNotFoundError(NotFoundError):
    code = "event_not_found"


class UpstreamError(SchedulingError):
    """The calendar provider failed for a reason other than not-found"""

    status_code = 502
    code = "upstream_error"
    retryable = True


class PersistenceDivergence(SchedulingError):
    """
    The local record store could not be reconciled after a remote calendar
    mutation succeeded. Never returned to callers as a failure; it becomes a
    warning flag on an otherwise successful response.
    """

    code = PERSISTENCE_DIVERGENCE


async def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    """Render SchedulingError subclasses as JSON"""
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    if exc.status_code >= 500:
        logger.error(f"[{correlation_id}] {exc.code}: {exc.message}")
    else:
        logger.info(f"[{correlation_id}] {exc.code}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.message,
            "code": exc.code,
            "retryable": exc.retryable,
        },
    )
