"""Common schemas used across the API."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    code: str | None = None


class MessageResponse(BaseModel):
    """Standard message response."""

    message: str
