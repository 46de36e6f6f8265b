"""Error envelope schemas shared by the request adapters."""

from __future__ import annotations

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Single field-level binding or validation issue."""

    field: str
    issue: str
    rule: str | None = None


class ErrorObject(BaseModel):
    """Canonical error payload object."""

    code: str
    message: str
    details: list[ErrorDetail] | None = None


class ErrorResponse(BaseModel):
    """Top-level error response envelope."""

    error: ErrorObject
