"""Application exception types."""

from typing import Any

from app.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error that maps directly to contract error payloads."""

    def __init__(self, status_code: int, code: str, message: str, details: Any | None = None) -> None:
        self.status_code = status_code
        self.payload = ErrorResponse(message=message, error=code, details=details)
        super().__init__(message)

    @property
    def code(self) -> str:
        return self.payload.error


def not_found(message: str = "Resource not found") -> ApiError:
    return ApiError(status_code=404, code="not_found", message=message)


def server_error(message: str = "Internal server error") -> ApiError:
    return ApiError(status_code=500, code="server_error", message=message)


__all__ = ["ApiError", "not_found", "server_error"]
