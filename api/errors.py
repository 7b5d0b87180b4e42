"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from api.middleware import get_request_id
from core.exceptions import (
    DateOrderError,
    DependencyViolationError,
    InvalidMoveError,
    QuoteNameConflictError,
    ServiceInUseError,
)

logger = logging.getLogger(__name__)

# Most specific first; all are ValueError subclasses
_DOMAIN_ERRORS = [
    (DependencyViolationError, 409, ErrorCodes.DEPENDENCY_VIOLATION),
    (InvalidMoveError, 409, ErrorCodes.INVALID_MOVE),
    (DateOrderError, 400, ErrorCodes.INVALID_DATE_ORDER),
    (ServiceInUseError, 409, ErrorCodes.SERVICE_IN_USE),
    (QuoteNameConflictError, 409, ErrorCodes.ALREADY_EXISTS),
]


def _details(exc: Exception):
    check = getattr(exc, "check", None)
    if check is not None:
        return check.model_dump(mode="json")
    dependents = getattr(exc, "dependent_names", None)
    if dependents is not None:
        return {"dependent_services": dependents}
    return None


def _json(request: Request, status_code: int, code: str, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(
            code, message, details, request_id=get_request_id(request)
        ).model_dump(mode="json"),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        message = str(exc)
        for error_type, status_code, code in _DOMAIN_ERRORS:
            if isinstance(exc, error_type):
                return _json(request, status_code, code, message, _details(exc))

        if "not found" in message.lower():
            return _json(request, 404, ErrorCodes.NOT_FOUND, message)
        return _json(request, 400, ErrorCodes.INVALID_REQUEST, message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _json(request, 422, ErrorCodes.VALIDATION_ERROR, str(exc.errors()))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return _json(request, 500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
