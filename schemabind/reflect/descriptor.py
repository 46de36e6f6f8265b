"""Cached structural descriptions of dataclass types."""

from __future__ import annotations

import dataclasses
from dataclasses import MISSING
from typing import Any
from typing import get_type_hints

from schemabind.reflect.annotations import parse_api_options
from schemabind.reflect.annotations import parse_wire_options
from schemabind.reflect.types import is_struct
from schemabind.reflect.types import strip_annotated
from schemabind.reflect.types import unwrap_optional

JSON_METADATA_KEY = "json"
API_METADATA_KEY = "api"
EMBED_METADATA_KEY = "embed"

# Populated lazily, never invalidated. Concurrent population only repeats work.
_DESCRIPTORS: dict[Any, TypeDescriptor] = {}


def field(
    *,
    json: str | None = None,
    api: str | None = None,
    embed: bool = False,
    default: Any = MISSING,
    default_factory: Any = MISSING,
    **kwargs: Any,
) -> Any:
    """``dataclasses.field`` with wire name, schema annotation and embedding markers."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    if json is not None:
        metadata[JSON_METADATA_KEY] = json
    if api is not None:
        metadata[API_METADATA_KEY] = api
    if embed:
        metadata[EMBED_METADATA_KEY] = True
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata=metadata,
        **kwargs,
    )


@dataclasses.dataclass(frozen=True)
class FieldDescriptor:
    """One serialisable field of a dataclass."""

    name: str
    wire_name: str
    annotation: Any
    optional: bool
    embedded: bool
    options: dict[str, Any]

    @property
    def concrete_type(self) -> Any:
        """The annotation with ``Optional`` and ``Annotated`` layers removed."""
        return unwrap_optional(self.annotation)[0]

    @property
    def descriptor(self) -> TypeDescriptor | None:
        """Descriptor of the nested dataclass, if the field holds one."""
        return describe(self.concrete_type)


@dataclasses.dataclass(frozen=True)
class TypeDescriptor:
    """Ordered serialisable fields of a dataclass plus a case-insensitive wire-name index."""

    type: Any
    fields: tuple[FieldDescriptor, ...]

    def wire_index(self) -> dict[str, tuple[FieldDescriptor, ...]]:
        """Map lower-cased wire names to the field chain reaching them.

        Fields of embedded dataclasses are reachable at this level; the chain
        starts with the embedded field and ends with the leaf field.
        """
        index = _WIRE_INDEXES.get(self.type)
        if index is not None:
            return index

        index = {}
        for item in self.fields:
            nested = item.descriptor if item.embedded else None
            if nested is not None:
                for key, chain in nested.wire_index().items():
                    index.setdefault(key, (item,) + chain)
            else:
                index.setdefault(item.wire_name.lower(), (item,))
        _WIRE_INDEXES[self.type] = index
        return index

    def lookup(self, wire_name: str) -> tuple[FieldDescriptor, ...] | None:
        """Find the field chain for a wire name, ignoring case."""
        return self.wire_index().get(wire_name.lower())


_WIRE_INDEXES: dict[Any, dict[str, tuple[FieldDescriptor, ...]]] = {}


def describe(tp: Any) -> TypeDescriptor | None:
    """Return the cached descriptor of a dataclass type, or ``None`` for anything else."""
    tp = strip_annotated(tp)
    if not is_struct(tp):
        return None

    cached = _DESCRIPTORS.get(tp)
    if cached is not None:
        return cached

    descriptor = TypeDescriptor(type=tp, fields=tuple(_describe_fields(tp)))
    _DESCRIPTORS[tp] = descriptor
    return descriptor


def _describe_fields(tp: type) -> list[FieldDescriptor]:
    hints = get_type_hints(tp, include_extras=True)
    described: list[FieldDescriptor] = []
    for item in dataclasses.fields(tp):
        if item.name.startswith("_"):
            continue

        wire = parse_wire_options(item.metadata.get(JSON_METADATA_KEY), item.name)
        if wire.skip:
            continue

        described.append(
            FieldDescriptor(
                name=item.name,
                wire_name=wire.name,
                annotation=hints.get(item.name, item.type),
                optional=wire.optional,
                embedded=bool(item.metadata.get(EMBED_METADATA_KEY)),
                options=parse_api_options(item.metadata.get(API_METADATA_KEY)),
            )
        )
    return described
