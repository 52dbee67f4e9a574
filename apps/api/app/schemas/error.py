"""API error response schemas."""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Wire shape for every failure: ``{message, error}`` plus optional details."""

    message: str
    error: str
    details: Any | None = None
