"""Error envelope, request binding/validation errors and handler registration."""

from __future__ import annotations

from collections.abc import Sequence
import logging
from typing import Any

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from schemabind.schemas.error import ErrorDetail
from schemabind.schemas.error import ErrorObject
from schemabind.schemas.error import ErrorResponse
from schemabind.schemas.validation import ValidationFailure

logger = logging.getLogger(__name__)

_SOURCE_PREFIXES = frozenset({"body", "query", "path", "header", "cookie", "form"})


class APIError(Exception):
    """Base exception for explicit error responses."""

    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Sequence[ErrorDetail] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = list(details) if details else None


class RequestValidationFailed(APIError):
    """A bound request value did not satisfy its schema."""

    def __init__(self, failures: Sequence[ValidationFailure], *, message: str = "Request validation failed") -> None:
        self.failures = list(failures)
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            code="validation_error",
            message=message,
            details=failure_details(self.failures),
        )


class RequestBindingError(APIError):
    """Request values could not be decoded into the declared type."""

    def __init__(self, error: ValueError, *, source: str | None = None) -> None:
        self.error = error
        self.source = source
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            code="bad_request",
            message="Request could not be bound",
            details=binding_details(error, source=source),
        )


def failure_details(failures: Sequence[ValidationFailure]) -> list[ErrorDetail]:
    """Render validation failures as envelope details keyed by dotted path."""
    details: list[ErrorDetail] = []
    for failure in failures:
        field = ".".join(failure.path) if failure.path else "request"
        details.append(
            ErrorDetail(
                field=field,
                issue=failure.message or failure.rule.value,
                rule=failure.rule.value,
            )
        )
    return details


def binding_details(error: ValueError, *, source: str | None = None) -> list[ErrorDetail]:
    if isinstance(error, ValidationError):
        details: list[ErrorDetail] = []
        for issue in error.errors():
            location = [str(part) for part in issue.get("loc", ())]
            if source:
                location.insert(0, source)
            details.append(
                ErrorDetail(
                    field=".".join(location) or "request",
                    issue=str(issue.get("msg", "Invalid value")),
                )
            )
        return details
    return [ErrorDetail(field=source or "request", issue=str(error))]


def _build_error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: Sequence[ErrorDetail] | None = None,
) -> JSONResponse:
    payload = ErrorResponse(error=ErrorObject(code=code, message=message, details=list(details) if details else None))
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))


def _http_error_code(status_code: int) -> str:
    if status_code == status.HTTP_404_NOT_FOUND:
        return "not_found"
    if status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return "method_not_allowed"
    if status_code == status.HTTP_415_UNSUPPORTED_MEDIA_TYPE:
        return "unsupported_media_type"
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return "internal_error"
    return "bad_request"


def _format_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    if not isinstance(location, (tuple, list)):
        return str(location)

    filtered = [str(part) for part in location if part not in _SOURCE_PREFIXES]
    if filtered:
        return ".".join(filtered)
    if not location:
        return "request"
    return str(location[0])


async def request_validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI's own parameter errors in the shared envelope."""
    details = [
        ErrorDetail(field=_format_location(issue.get("loc", ())), issue=str(issue.get("msg", "Invalid value")))
        for issue in exc.errors()
    ]
    return _build_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        code="validation_error",
        message="Request validation failed",
        details=details,
    )


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict) and "code" in exc.detail and "message" in exc.detail:
        return _build_error_response(
            status_code=exc.status_code,
            code=str(exc.detail["code"]),
            message=str(exc.detail["message"]),
        )

    message = str(exc.detail) if isinstance(exc.detail, str) and exc.detail else "Request failed"
    return _build_error_response(
        status_code=exc.status_code,
        code=_http_error_code(exc.status_code),
        message=message,
    )


async def api_error_handler(_: Request, exc: APIError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("API error %s: %s", exc.code, exc.message)
    return _build_error_response(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Hide internal exceptions behind a stable 500 envelope."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _build_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="internal_error",
        message="Internal server error",
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach the envelope handlers to a FastAPI app."""
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
