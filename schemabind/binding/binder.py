"""Bind path, query, header, form and body values into typed instances."""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
import logging
from typing import Any
from typing import TypeVar
from urllib.parse import parse_qsl

from schemabind.binding.coerce import coerce
from schemabind.binding.decode import decode_body
from schemabind.binding.decode import transfer
from schemabind.binding.tree import build_tree

logger = logging.getLogger(__name__)

T = TypeVar("T")

JSON_MEDIA_TYPE = "application/json"
FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"


class UnsupportedContentTypeError(ValueError):
    """Raised when a body's media type has no decoder."""

    def __init__(self, content_type: str | None) -> None:
        self.content_type = content_type
        super().__init__(f"Unsupported content type: {content_type or '<none>'}")


def bind_pairs(pairs: Iterable[tuple[str, str]], typ: type[T], *, split: bool = True) -> T:
    """Run pairs through tree assembly, coercion and the strict decoder."""
    tree = build_tree(pairs, split=split)
    return transfer(coerce(tree, typ), typ)


def bind_path(values: Mapping[str, str], typ: type[T]) -> T:
    """Bind matched route parameters; keys are taken literally."""
    return bind_pairs(values.items(), typ, split=False)


def bind_query(query: str | bytes | Iterable[tuple[str, str]], typ: type[T]) -> T:
    """Bind a raw query string or already decoded ``(key, value)`` pairs."""
    if isinstance(query, bytes):
        query = query.decode("latin-1")
    if isinstance(query, str):
        query = parse_qsl(query.lstrip("?"), keep_blank_values=True)
    return bind_pairs(query, typ)


def bind_headers(pairs: Iterable[tuple[str, str]], typ: type[T]) -> T:
    """Bind headers; only the first value of each case-insensitive name counts."""
    first: dict[str, tuple[str, str]] = {}
    for name, value in pairs:
        first.setdefault(name.lower(), (name, value))
    return bind_pairs(first.values(), typ, split=False)


def _form_value(value: Any) -> str:
    filename = getattr(value, "filename", None)
    if filename is not None:
        return filename
    return str(value)


def bind_form(pairs: Iterable[tuple[str, Any]], typ: type[T]) -> T:
    """Bind form or multipart fields; an uploaded file contributes its filename."""
    return bind_pairs(((key, _form_value(value)) for key, value in pairs), typ)


def media_type(content_type: str | None) -> str:
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def bind_body(body: bytes | str, content_type: str | None, typ: type[T]) -> T:
    """Decode a request body by media type.

    JSON (including ``+json`` suffixes) goes straight to the strict decoder;
    URL-encoded forms reuse the key-path tree.
    """
    kind = media_type(content_type)
    if kind == JSON_MEDIA_TYPE or kind.endswith("+json"):
        return decode_body(body, typ)
    if kind == FORM_MEDIA_TYPE:
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        return bind_query(body, typ)

    logger.debug("No body decoder for content type %r", content_type)
    raise UnsupportedContentTypeError(content_type)
