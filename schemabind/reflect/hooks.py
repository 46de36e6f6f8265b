"""Optional per-type capabilities probed by the builder and the validator.

A type opts into any subset of these by defining the matching method; there is
no common base class. Schema hooks are looked up on the class, validation
hooks on the value being validated.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING
from typing import Any
from typing import Protocol
from typing import runtime_checkable

from schemabind.reflect.types import strip_annotated

if TYPE_CHECKING:
    from schemabind.schemas.schema import Schema
    from schemabind.validation.validator import Validator

_NAME_SPLITTER = re.compile(r"[^-\w]+")


@runtime_checkable
class HasName(Protocol):
    """A type with an explicit schema name; always promoted to a named schema."""

    @classmethod
    def api_name(cls) -> str: ...


@runtime_checkable
class HasFullSchema(Protocol):
    """A type whose schema is returned verbatim, skipping introspection."""

    @classmethod
    def api_full_schema(cls) -> Schema: ...


@runtime_checkable
class HasBaseSchema(Protocol):
    """A type providing starting values that introspection builds on."""

    @classmethod
    def api_base_schema(cls) -> Schema: ...


@runtime_checkable
class HasDescription(Protocol):
    @classmethod
    def api_description(cls) -> str: ...


@runtime_checkable
class HasEnum(Protocol):
    @classmethod
    def api_enum(cls) -> list[Any]: ...


@runtime_checkable
class HasExample(Protocol):
    @classmethod
    def api_example(cls) -> Any: ...


@runtime_checkable
class CanValidateFull(Protocol):
    """A value that performs all of its own validation."""

    def full_validate(self, v: Validator) -> None: ...


@runtime_checkable
class CanValidatePost(Protocol):
    """A value that adds checks after the structural validation pass."""

    def post_validate(self, v: Validator) -> None: ...


def _call_hook(tp: Any, capability: type, method: str) -> Any:
    tp = strip_annotated(tp)
    if not isinstance(tp, capability):
        return None
    return getattr(tp, method)()


def fix_name(name: str) -> str:
    """Turn an arbitrary identifier into a schema name: split on punctuation, capitalise parts."""
    parts = [part for part in _NAME_SPLITTER.split(name) if part]
    return "".join(part[:1].upper() + part[1:] for part in parts)


def has_custom_name(tp: Any) -> bool:
    return isinstance(strip_annotated(tp), HasName)


def get_name(tp: Any) -> str:
    """Schema name of a type, honouring ``api_name()``."""
    name = _call_hook(tp, HasName, "api_name")
    if not name:
        tp = strip_annotated(tp)
        name = getattr(tp, "__name__", None) or str(tp)
    return fix_name(name)


def get_qualified_name(tp: Any) -> str:
    """Schema name prefixed with the defining module path."""
    module = getattr(strip_annotated(tp), "__module__", "") or ""
    return fix_name(module) + get_name(tp)


def get_custom_schema(tp: Any) -> tuple[Schema | None, bool]:
    """Return ``(schema, is_full)`` from the type's schema hooks, or ``(None, False)``."""
    full = _call_hook(tp, HasFullSchema, "api_full_schema")
    if full is not None:
        return full, True
    base = _call_hook(tp, HasBaseSchema, "api_base_schema")
    if base is not None:
        return base, False
    return None, False


def get_description(tp: Any) -> str | None:
    return _call_hook(tp, HasDescription, "api_description")


def get_enum(tp: Any) -> list[Any] | None:
    return _call_hook(tp, HasEnum, "api_enum")


def get_example(tp: Any) -> Any:
    return _call_hook(tp, HasExample, "api_example")
