"""Request ID middleware and access logging."""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from school_portal.core.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


def get_request_id(request: Request) -> str:
    """Request ID assigned by the middleware, or ``unknown`` outside a request."""
    return getattr(request.state, "request_id", "unknown")


def _incoming_request_id(request: Request) -> str:
    supplied = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
    if supplied and len(supplied) <= MAX_REQUEST_ID_LENGTH:
        return supplied
    return uuid.uuid4().hex


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag every request with an ID, echo it back and log start and completion.

    A client-supplied ``X-Request-ID`` is reused so upload errors can be
    correlated with the caller's own logs.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = _incoming_request_id(request)
        request.state.request_id = request_id
        fields = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }
        content_length = request.headers.get("content-length", "")
        if content_length.isdigit():
            fields["content_length"] = int(content_length)

        started = time.perf_counter()
        logger.info("Request started", extra=fields)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={**fields, "latency_ms": _elapsed_ms(started), "error": str(e)},
                exc_info=True,
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "Request completed",
            extra={**fields, "status_code": response.status_code, "latency_ms": _elapsed_ms(started)},
        )
        return response


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
