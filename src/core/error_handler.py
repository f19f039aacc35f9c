"""Error envelope, correlation ids and logging setup for the voice order API.

Every failure that reaches the HTTP layer is rendered as an ``ErrorResponse``
carrying the request's correlation id. Outside production the body also
includes details, the exception type and a traceback; in production only
``correlation_id`` and ``type`` are exposed.
"""

import logging
import sys
import traceback
import uuid
from contextvars import ContextVar
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from pythonjsonlogger.json import JsonFormatter
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from core.config import get_settings
from core.exceptions import DuplicateJargonError, JargonNotFoundError
from core.security_config import get_allowed_error_fields, is_sensitive_key
from schemas.api import ErrorResponse


# Bound per HTTP request by CorrelationIdMiddleware and per socket by the
# recognition WebSocket (to its session id).
_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

REDACTED = "[REDACTED]"

# Domain error -> (public message, status code)
DOMAIN_ERRORS: dict[type[Exception], tuple[str, int]] = {
    DuplicateJargonError: ("The requested resource already exists", 409),
    JargonNotFoundError: ("The requested resource was not found", 404),
}


def get_correlation_id() -> str:
    """Return the current correlation id, creating one if none is bound."""
    current = _correlation_id_var.get()
    if not current:
        current = str(uuid.uuid4())
        _correlation_id_var.set(current)
    return current


def set_correlation_id(correlation_id: str | None) -> None:
    _correlation_id_var.set(correlation_id)


class StructuredLogger:
    """Logger wrapper that attaches the correlation id and redacted fields.

    Keyword arguments become the record's ``structured_data``; keys matching
    ``SENSITIVE_KEYS`` are replaced with ``[REDACTED]`` at any depth.
    """

    def __init__(self, logger_name: str):
        self.logger = logging.getLogger(logger_name)

    def _emit(
        self, level: int, message: str, fields: dict[str, Any], exc_info: bool = False
    ) -> None:
        correlation_id = get_correlation_id()
        payload = {
            "correlation_id": correlation_id,
            "message": message,
            **self._sanitize_data(fields),
        }
        # JSON output carries the id inside structured_data
        if get_settings().ENVIRONMENT != "production":
            message = f"[{correlation_id}] {message}"
        self.logger.log(
            level, message, extra={"structured_data": payload}, exc_info=exc_info
        )

    def _sanitize_data(self, data: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(data, dict):
            return {}
        return {
            key: REDACTED if is_sensitive_key(key) else self._sanitize_value(value)
            for key, value in data.items()
        }

    def _sanitize_value(self, value: Any) -> Any:
        if isinstance(value, dict):
            return self._sanitize_data(value)
        if isinstance(value, list):
            return [self._sanitize_value(item) for item in value]
        return value

    def debug(self, message: str, **fields: Any) -> None:
        self._emit(logging.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._emit(logging.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit(logging.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._emit(logging.ERROR, message, fields)

    def exception(self, message: str, **fields: Any) -> None:
        self._emit(logging.ERROR, message, fields, exc_info=True)


structured_logger = StructuredLogger(__name__)


class ExceptionNormalizationMiddleware(BaseHTTPMiddleware):
    """Route exceptions that escape the app into ``global_exception_handler``."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:  # noqa: BLE001
            return await global_exception_handler(request, exc)


def _build_error_response(
    *,
    correlation_id: str,
    error_type: str,
    message: str,
    environment: str,
    details: dict[str, Any] | None = None,
    traceback_str: str | None = None,
    exception_type: str | None = None,
    validation_errors: Any | None = None,
    status_code: int = 500,
) -> JSONResponse:
    """Render an ErrorResponse, dropping fields the environment may not expose."""
    allowed = get_allowed_error_fields(environment)
    optional = {
        "details": details or None,
        "traceback": traceback_str,
        "exception_type": exception_type,
        "validation_errors": validation_errors,
    }
    error_body: dict[str, Any] = {"correlation_id": correlation_id, "type": error_type}
    error_body.update(
        {key: value for key, value in optional.items() if key in allowed and value is not None}
    )
    body = ErrorResponse(message=message, error=error_body)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map any exception to the error envelope with the right status code."""
    environment = get_settings().ENVIRONMENT
    respond = _response_factory(environment, get_correlation_id())

    if isinstance(exc, StarletteHTTPException):
        return respond(
            error_type="http_error",
            message="An HTTP error occurred",
            details={"detail": exc.detail},
            exception_type=exc.__class__.__name__,
            status_code=exc.status_code,
        )

    if isinstance(exc, ValidationError | RequestValidationError):
        errors = exc.errors()
        structured_logger.warning("Validation error", validation_errors=errors)
        return respond(
            error_type="validation_error",
            message="Invalid request data provided",
            validation_errors=errors,
            status_code=422,
        )

    if isinstance(exc, IntegrityError):
        structured_logger.error("Integrity constraint violation", error=str(exc))
        return respond(
            error_type="integrity_error",
            message="A data integrity constraint was violated",
            status_code=409,
        )

    if type(exc) in DOMAIN_ERRORS:
        message, status_code = DOMAIN_ERRORS[type(exc)]
        structured_logger.warning(
            "Domain error", error_type=exc.__class__.__name__, domain_message=str(exc)
        )
        return respond(
            error_type="domain_error", message=message, status_code=status_code
        )

    structured_logger.exception(
        "Unhandled exception", exception_type=exc.__class__.__name__, error=str(exc)
    )
    return respond(
        error_type="internal_server_error",
        message="An internal error occurred",
        traceback_str="".join(traceback.format_exception(exc)).strip(),
        exception_type=exc.__class__.__name__,
    )


def _response_factory(environment: str, correlation_id: str):
    def respond(**kwargs: Any) -> JSONResponse:
        return _build_error_response(
            correlation_id=correlation_id, environment=environment, **kwargs
        )

    return respond


def setup_logging() -> None:
    """Install the root handler once: JSON lines in production, text elsewhere."""
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    environment = get_settings().ENVIRONMENT
    level = logging.DEBUG if environment == "development" else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if environment == "production":
        handler.setFormatter(
            JsonFormatter(fmt="%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpx"):
            logging.getLogger(noisy).setLevel(logging.WARNING)
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root_logger.setLevel(level)
    root_logger.addHandler(handler)
