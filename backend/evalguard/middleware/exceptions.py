"""Exception handlers for consistent error responses.

Authorization outcomes (denied, blocked, needs confirmation) are normal
response bodies, not exceptions.  The exceptions below cover the few
cases that really are errors: a guarded endpoint called by the wrong
actor, an expired confirmation token, an unreachable confirmation store.
"""

import logging
from typing import Union

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class EvalGuardException(Exception):
    """Base exception for EvalGuard application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(self.message)


class PermissionDeniedError(EvalGuardException):
    """The current actor may not use a guarded endpoint."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="PERMISSION_DENIED",
        )


class ConfirmationExpiredError(EvalGuardException):
    """The pending-action token is unknown, used, expired, or not the actor's."""

    def __init__(self, message: str = "Confirmation expired or not found"):
        super().__init__(
            message=message,
            status_code=status.HTTP_410_GONE,
            error_code="CONFIRMATION_EXPIRED",
        )


class ConfirmationUnavailableError(EvalGuardException):
    """The confirmation store could not record a pending action."""

    def __init__(self, message: str = "Confirmation store unavailable"):
        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code="CONFIRMATION_UNAVAILABLE",
        )


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    details: Union[dict, list, None] = None,
) -> JSONResponse:
    """Build the {"error": {"code", "message", "details"?}} body every error uses."""
    error = {"code": error_code, "message": message}
    if details:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error})


async def evalguard_exception_handler(
    request: Request,
    exc: EvalGuardException,
) -> JSONResponse:
    """Denied guard, expired token or unreachable store: log and pass on the code."""
    logger.warning(
        f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}"
    )
    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
        error_code=exc.error_code,
    )


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException],
) -> JSONResponse:
    """Wrap framework errors (401 without an actor, 404, 405) in the error body."""
    if exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {exc.detail}")

    return create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        error_code=f"HTTP_{exc.status_code}",
    )


async def validation_exception_handler(
    request: Request,
    exc: Union[RequestValidationError, ValidationError],
) -> JSONResponse:
    """Malformed request bodies: missing actor, unknown predicate name, etc.

    Each pydantic error becomes {"field": "body -> actor -> id", "message", "type"}.
    """
    errors = [
        {
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Invalid request on {request.url.path}: {len(errors)} error(s)")

    # 422 as a literal: Starlette renamed the constant
    return create_error_response(
        status_code=422,
        message="Validation error",
        error_code="VALIDATION_ERROR",
        details={"errors": errors},
    )


async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Anything else is a bug; callers get a generic 500 and fail closed."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="Authorization service error",
        error_code="INTERNAL_SERVER_ERROR",
    )


def register_exception_handlers(app):
    """Register all custom exception handlers with FastAPI app."""
    app.add_exception_handler(EvalGuardException, evalguard_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
