"""
Error Taxonomy and Global Error Handling

This module defines the service-wide exception hierarchy and the FastAPI
exception handlers that translate it into HTTP responses.

Design Goals
------------
- Never leak internal exception details or credentials to clients
- Always return deterministic, machine-readable error responses
- Log full stack traces internally for debugging
- Keep upstream (embedding / vector / generative) failures local: they drive
  the fallback machinery and are never surfaced as errors
"""

from __future__ import annotations

import logging
from typing import Dict, Any, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("mediphant.errors")


# ---------------------------------------------------------------------
# Exception Hierarchy
# ---------------------------------------------------------------------

class MediphantError(Exception):
    """
    Base class for all service errors.

    Subclasses fix the HTTP status, a stable machine-readable error code and
    a safe public message. The constructor message is for logs only and is
    never returned to clients.
    """

    status_code: int = 500
    error_code: str = "internal_server_error"
    public_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        public_message: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message or self.public_message)
        if public_message is not None:
            self.public_message = public_message
        self.extra: Dict[str, Any] = dict(extra or {})

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error": self.error_code,
            "detail": self.public_message,
        }
        payload.update(self.extra)
        return payload

    def headers(self) -> Optional[Dict[str, str]]:
        return None


class ValidationError(MediphantError):
    """Bad or missing request parameter."""

    status_code = 400
    error_code = "validation_failed"
    public_message = "Validation failed"


class RateLimitExceeded(MediphantError):
    """Client exceeded its request budget for the current window."""

    status_code = 429
    error_code = "rate_limit_exceeded"
    public_message = "Rate limit exceeded. Please try again later."

    def __init__(self, retry_after: int, message: Optional[str] = None) -> None:
        super().__init__(message)
        self.retry_after = max(1, int(retry_after))

    def headers(self) -> Optional[Dict[str, str]]:
        return {"Retry-After": str(self.retry_after)}


class UpstreamServiceError(MediphantError):
    """
    Failure of an external dependency (embedding, vector index, generative
    model), including timeouts.

    Always recovered locally by the caller; reaching an HTTP handler means a
    code path forgot to recover, which is reported as a generic 500.
    """


class EmptyCorpusError(MediphantError):
    """Chunking produced no retrievable units. Fatal to an indexing job."""


class InternalError(MediphantError):
    """Unexpected failure while serving a request."""


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def service_error_handler(
    request: Request,
    exc: MediphantError,
) -> JSONResponse:
    """
    Translate a taxonomy error into its HTTP response.

    Client errors (4xx) are logged at INFO without a traceback; anything in
    the 5xx range is logged with the full stack trace.
    """
    if exc.status_code >= 500:
        logger.error(
            "Service error during request: %s %s (%s)",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc_info=exc,
        )
    else:
        logger.info(
            "Rejected request: %s %s -> %d %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.error_code,
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_payload(),
        headers=exc.headers(),
    )


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    Report request schema violations as 400 with per-field messages.

    Only field locations and validator messages are returned; submitted
    values are not echoed back.
    """
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return await service_error_handler(
        request,
        ValidationError(
            "Request schema validation failed",
            extra={"details": details},
        ),
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    Behavior
    --------
    - Logs the full exception stack trace for internal diagnostics.
    - Returns a generic 500 error to the client with no internal details.

    Parameters
    ----------
    request : Request
        The incoming HTTP request that triggered the exception.

    exc : Exception
        The uncaught exception instance.

    Returns
    -------
    JSONResponse
        A JSON 500 response with a minimal error payload.
    """

    # Log full traceback internally (never returned to client)
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "detail": "Internal server error",
    }

    return JSONResponse(
        status_code=500,
        content=payload,
    )
