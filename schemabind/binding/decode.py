"""Strict structural decoding shared by every binding source."""

from __future__ import annotations

from functools import lru_cache
import logging
from typing import Any

from pydantic import TypeAdapter
from pydantic_core import from_json
from pydantic_core import to_json

from schemabind.reflect.descriptor import TypeDescriptor
from schemabind.reflect.descriptor import describe
from schemabind.reflect.types import Kind
from schemabind.reflect.types import element_type
from schemabind.reflect.types import kind_of
from schemabind.reflect.types import map_value_type
from schemabind.reflect.types import strip_annotated
from schemabind.reflect.types import tuple_shape
from schemabind.reflect.types import unwrap_optional

logger = logging.getLogger(__name__)


@lru_cache(maxsize=256)
def _adapter(tp: Any) -> TypeAdapter[Any]:
    return TypeAdapter(tp)


def reshape(document: Any, tp: Any) -> Any:
    """Rewrite wire keys to attribute names so ``document`` lines up with ``tp``.

    Keys match wire names case-insensitively, fields of embedded dataclasses
    are moved under the embedding attribute and unknown keys are dropped.
    """
    inner, _ = unwrap_optional(strip_annotated(tp))
    kind = kind_of(inner)
    if isinstance(document, dict):
        if kind is Kind.STRUCT:
            return _reshape_struct(document, describe(inner))
        if kind is Kind.MAP:
            value_type = map_value_type(inner)
            return {key: reshape(item, value_type) for key, item in document.items()}
    elif isinstance(document, list):
        if kind in (Kind.LIST, Kind.SET):
            item_type = element_type(inner)
            return [reshape(item, item_type) for item in document]
        if kind is Kind.TUPLE:
            shape = tuple_shape(inner)
            if shape is None:
                item_type = element_type(inner)
                return [reshape(item, item_type) for item in document]
            return [
                reshape(item, shape[index]) if index < len(shape) else item
                for index, item in enumerate(document)
            ]
    return document


def _skeleton(descriptor: TypeDescriptor) -> dict[str, Any]:
    """Empty objects for required embedded dataclasses, so they exist even without keys."""
    shaped: dict[str, Any] = {}
    for item in descriptor.fields:
        nested = item.descriptor if item.embedded else None
        if nested is not None and not unwrap_optional(item.annotation)[1]:
            shaped[item.name] = _skeleton(nested)
    return shaped


def _reshape_struct(document: dict[str, Any], descriptor: TypeDescriptor | None) -> dict[str, Any]:
    if descriptor is None:
        return document

    shaped = _skeleton(descriptor)
    for key, item in document.items():
        chain = descriptor.lookup(key)
        if chain is None:
            logger.debug("Dropping unknown key %r for %s", key, descriptor.type.__name__)
            continue

        target = shaped
        for link in chain[:-1]:
            nested = target.get(link.name)
            if not isinstance(nested, dict):
                nested = target[link.name] = {}
            target = nested
        leaf = chain[-1]
        if leaf.name not in target:
            target[leaf.name] = reshape(item, leaf.annotation)
    return shaped


def transfer(document: Any, tp: Any) -> Any:
    """Decode a JSON-compatible document into an instance of ``tp``.

    Decoding goes through JSON in strict mode: numbers, booleans and strings
    must already have the right JSON type, while ISO dates, UUIDs and enum
    values are accepted as strings. Raises ``pydantic.ValidationError``.
    """
    shaped = reshape(document, tp)
    return _adapter(tp).validate_json(to_json(shaped), strict=True)


def decode_body(body: bytes | str, tp: Any) -> Any:
    """Parse a JSON body and decode it; malformed JSON raises ``ValueError``."""
    return transfer(from_json(body), tp)
