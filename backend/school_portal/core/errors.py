"""Error handling and consistent error response format.

Every error leaves the API as ``{error_code, message, details, request_id}``.
"""

from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from school_portal.common.request_id import get_request_id
from school_portal.core.app_exceptions import AppError
from school_portal.core.config import settings
from school_portal.core.logging import get_logger

logger = get_logger(__name__)


class ErrorResponse(BaseModel):
    """Error response envelope."""

    error_code: str
    message: str
    details: Any | None = None
    request_id: str | None = None


def _error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        details=details,
        request_id=get_request_id(request),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def _unpack_detail(detail: Any) -> tuple[str, str, Any]:
    """Split an HTTPException detail into (code, message, details)."""
    if isinstance(detail, dict):
        if "code" in detail:
            return detail["code"], detail.get("message", "An error occurred"), detail.get("details")
        rest = dict(detail)
        return "HTTP_ERROR", rest.pop("message", "An error occurred"), rest or None
    return "HTTP_ERROR", str(detail), None


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors (422), e.g. a missing upload or bad query value."""
    details = [
        {
            "field": ".".join(str(loc) for loc in error.get("loc", [])),
            "issue": error.get("msg", "Validation error"),
            "type": error.get("type", "validation_error"),
        }
        for error in exc.errors()
    ]
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Invalid request data",
        details,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions, including AppError."""
    if isinstance(exc, AppError):
        code, message, details = exc.code, exc.message, exc.details
    else:
        code, message, details = _unpack_detail(exc.detail)

    if exc.status_code >= 500:
        logger.error("HTTP error", extra={"request_id": get_request_id(request), "error_code": code})

    return _error_response(
        request, exc.status_code, code, message, details, headers=getattr(exc, "headers", None)
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions (500)."""
    logger.error(
        "Unhandled exception",
        extra={"request_id": get_request_id(request), "path": request.url.path},
        exc_info=exc,
    )

    # Internal details stay out of production responses
    if settings.is_production:
        message, details = "An internal server error occurred", None
    else:
        message, details = str(exc), {"type": type(exc).__name__}

    return _error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", message, details
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
