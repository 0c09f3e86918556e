"""Application-specific exceptions for consistent error handling."""

from typing import Any

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Application error with standardized error code."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | list[Any] | None = None,
    ):
        """Initialize application error."""
        super().__init__(
            status_code=status_code,
            detail={
                "code": code,
                "message": message,
                "details": details,
            },
        )
        self.code = code
        self.message = message
        self.details = details


def unknown_entity(message: str, supported: list[str]) -> AppError:
    """404 for an entity type that has no importer or template."""
    return AppError(
        status_code=status.HTTP_404_NOT_FOUND,
        code="UNKNOWN_ENTITY",
        message=message,
        details={"supported": supported},
    )


def payload_too_large(limit: int) -> AppError:
    """413 for an upload over the configured byte limit."""
    return AppError(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        code="PAYLOAD_TOO_LARGE",
        message="File too large",
        details={"limit": limit},
    )


def invalid_encoding(position: int) -> AppError:
    """400 for an upload that is not valid UTF-8."""
    return AppError(
        status_code=status.HTTP_400_BAD_REQUEST,
        code="INVALID_ENCODING",
        message="CSV file must be UTF-8 encoded",
        details={"position": position},
    )
