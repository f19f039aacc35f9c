"""Response envelope shared by every HTTP endpoint."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ApiResponse[T](BaseModel):
    """``{success, data, message, error}`` wrapper around an endpoint payload.

    ``data`` is set on success; ``error`` carries the sanitized error body
    built by the global exception handler.
    """

    success: bool = True
    data: T | None = None
    message: str = "Operation completed successfully"
    error: dict[str, Any] | None = None


class ErrorResponse(ApiResponse[None]):
    success: bool = False
    message: str = "An error occurred"
