from typing import Any

from fastapi import HTTPException, status
from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Detailed error information."""

    type: str
    message: str
    field: str | None = None


class StandardErrorResponse(BaseModel):
    """Standardized error response format."""

    error: str
    message: str
    details: list[ErrorDetail] | None = None
    status_code: int


def error_content(
    error: str, message: str, status_code: int, details: list[ErrorDetail] | None = None
) -> dict[str, Any]:
    """Build the JSON body shared by every error response."""
    return StandardErrorResponse(
        error=error,
        message=message,
        details=details,
        status_code=status_code,
    ).model_dump()


class AuthenticationError(HTTPException):
    """Standardized authentication error."""

    def __init__(self, message: str = "Authentication required", details: list[ErrorDetail] | None = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_content("authentication_required", message, status.HTTP_401_UNAUTHORIZED, details),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @property
    def message(self) -> str:
        return self.detail["message"]
