"""FastAPI dependencies that bind and validate request values."""

from __future__ import annotations

from collections.abc import Awaitable
from collections.abc import Callable
import logging
from typing import Any
from typing import TypeVar

from fastapi import Request
from fastapi import status

from schemabind.binding.binder import FORM_MEDIA_TYPE
from schemabind.binding.binder import UnsupportedContentTypeError
from schemabind.binding.binder import bind_body
from schemabind.binding.binder import bind_form
from schemabind.binding.binder import bind_headers
from schemabind.binding.binder import bind_path
from schemabind.binding.binder import bind_query
from schemabind.binding.binder import media_type
from schemabind.builder.schema_builder import SchemaBuilder
from schemabind.builder.schema_builder import get_schema_builder
from schemabind.core.errors import APIError
from schemabind.core.errors import RequestBindingError
from schemabind.core.errors import RequestValidationFailed
from schemabind.validation.validate import validate
from schemabind.validation.validator import ValidationProvider
from schemabind.validation.validator import Validator

logger = logging.getLogger(__name__)

T = TypeVar("T")

MULTIPART_MEDIA_TYPE = "multipart/form-data"


def validate_bound(
    value: Any,
    typ: Any,
    *,
    source: str,
    builder: SchemaBuilder | None = None,
    provider: ValidationProvider | None = None,
) -> None:
    """Validate a bound value against the schema of ``typ``.

    Failure paths start with ``source`` so a detail reads ``query.limit``.
    Raises :class:`RequestValidationFailed` when anything fails.
    """
    schema = (builder or get_schema_builder()).build(typ)
    v = Validator(provider, path=[source])
    validate(schema, value, v)
    if v.has_failures():
        logger.debug("Rejected %s values for %r with %d failure(s)", source, typ, len(v.failures))
        raise RequestValidationFailed(v.failures)


def _bind(source: str, binder: Callable[[], T]) -> T:
    try:
        return binder()
    except UnsupportedContentTypeError as exc:
        raise APIError(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            code="unsupported_media_type",
            message=str(exc),
        ) from exc
    except ValueError as exc:
        raise RequestBindingError(exc, source=source) from exc


def bind_path_params(
    typ: type[T],
    *,
    builder: SchemaBuilder | None = None,
    provider: ValidationProvider | None = None,
) -> Callable[[Request], T]:
    """Dependency binding matched route parameters into ``typ``."""

    def dependency(request: Request) -> T:
        values = {name: str(value) for name, value in request.path_params.items()}
        bound = _bind("path", lambda: bind_path(values, typ))
        validate_bound(bound, typ, source="path", builder=builder, provider=provider)
        return bound

    return dependency


def bind_query_params(
    typ: type[T],
    *,
    builder: SchemaBuilder | None = None,
    provider: ValidationProvider | None = None,
) -> Callable[[Request], T]:
    """Dependency binding the query string into ``typ``."""

    def dependency(request: Request) -> T:
        pairs = request.query_params.multi_items()
        bound = _bind("query", lambda: bind_query(pairs, typ))
        validate_bound(bound, typ, source="query", builder=builder, provider=provider)
        return bound

    return dependency


def bind_header_params(
    typ: type[T],
    *,
    builder: SchemaBuilder | None = None,
    provider: ValidationProvider | None = None,
) -> Callable[[Request], T]:
    """Dependency binding request headers into ``typ``."""

    def dependency(request: Request) -> T:
        pairs = request.headers.items()
        bound = _bind("header", lambda: bind_headers(pairs, typ))
        validate_bound(bound, typ, source="header", builder=builder, provider=provider)
        return bound

    return dependency


def bind_request_body(
    typ: type[T],
    *,
    builder: SchemaBuilder | None = None,
    provider: ValidationProvider | None = None,
) -> Callable[[Request], Awaitable[T]]:
    """Dependency decoding a JSON, URL-encoded or multipart body into ``typ``."""

    async def dependency(request: Request) -> T:
        content_type = request.headers.get("content-type")
        if media_type(content_type) in (FORM_MEDIA_TYPE, MULTIPART_MEDIA_TYPE):
            form = await request.form()
            pairs = form.multi_items()
            bound = _bind("body", lambda: bind_form(pairs, typ))
        else:
            body = await request.body()
            bound = _bind("body", lambda: bind_body(body, content_type, typ))
        validate_bound(bound, typ, source="body", builder=builder, provider=provider)
        return bound

    return dependency
