"""
Error envelope for API responses.

Every error body has the shape {"error": {"code", "message", "detail"}},
whether it comes from a domain exception, the database or an APIError.
"""

from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from ..core.errors import (
    EntityNotFoundError,
    InvalidReferenceError,
    InvalidSelectionError,
    JamNotFoundError,
)


class APIError(HTTPException):
    """An HTTP error rendered through the error envelope."""

    def __init__(self, status_code: int, code: str, message: str, detail: str | None = None):
        self.code = code
        self.message = message
        self.error_detail = detail
        super().__init__(
            status_code=status_code,
            detail={"code": code, "message": message, "detail": detail},
        )


class NotFoundError(APIError):
    def __init__(self, resource: str, identifier: Any, context: str | None = None):
        detail = f"{resource} with ID {identifier}"
        if context:
            detail = f"{detail} in {context}"
        super().__init__(404, "NOT_FOUND", f"{resource} not found", detail)


class ValidationError(APIError):
    def __init__(self, message: str, detail: str | None = None):
        super().__init__(400, "VALIDATION_ERROR", message, detail)


class ServiceUnavailableError(APIError):
    def __init__(self, service: str):
        super().__init__(
            503,
            "SERVICE_UNAVAILABLE",
            f"{service} is currently unavailable",
            f"The {service} service is not configured or experiencing issues",
        )


def to_api_error(exc: Exception) -> APIError:
    """Translate a domain exception into its API error."""
    if isinstance(exc, JamNotFoundError):
        return NotFoundError(
            resource="Jam",
            identifier=f"P{exc.period} J{exc.jam_number}",
            context=f"game {exc.game_id}",
        )
    if isinstance(exc, EntityNotFoundError):
        return NotFoundError(resource=exc.resource, identifier=exc.identifier)
    if isinstance(exc, (InvalidSelectionError, InvalidReferenceError)):
        return ValidationError(message=str(exc))
    raise TypeError(f"No API error mapping for {type(exc).__name__}")


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    content = {
        "error": {
            "code": exc.code,
            "message": exc.message,
        }
    }
    if exc.error_detail:
        content["error"]["detail"] = exc.error_detail

    return JSONResponse(status_code=exc.status_code, content=content)


async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render domain exceptions through the APIError envelope."""
    return await api_error_handler(request, to_api_error(exc))
