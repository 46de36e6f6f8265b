"""Schema derivation from type annotations with named-schema promotion."""

from __future__ import annotations

from datetime import date
from datetime import datetime
from datetime import time
from decimal import Decimal
from functools import lru_cache
import logging
from typing import Any
from uuid import UUID

from schemabind.builder.options import apply_options
from schemabind.builder.options import has_schema_overrides
from schemabind.core.config import get_binder_settings
from schemabind.reflect.descriptor import describe
from schemabind.reflect.hooks import get_custom_schema
from schemabind.reflect.hooks import get_description
from schemabind.reflect.hooks import get_enum
from schemabind.reflect.hooks import get_example
from schemabind.reflect.hooks import get_name
from schemabind.reflect.hooks import get_qualified_name
from schemabind.reflect.hooks import has_custom_name
from schemabind.reflect.types import Kind
from schemabind.reflect.types import element_type
from schemabind.reflect.types import kind_of
from schemabind.reflect.types import literal_values
from schemabind.reflect.types import map_value_type
from schemabind.reflect.types import strip_annotated
from schemabind.reflect.types import tuple_shape
from schemabind.reflect.types import union_members
from schemabind.reflect.types import unwrap_optional
from schemabind.schemas.schema import DataType
from schemabind.schemas.schema import Schema

logger = logging.getLogger(__name__)

_SCALAR_TYPES = {
    Kind.STRING: DataType.STRING,
    Kind.INTEGER: DataType.INTEGER,
    Kind.NUMBER: DataType.NUMBER,
    Kind.BOOLEAN: DataType.BOOLEAN,
}


def default_full_schemas() -> dict[Any, Schema]:
    """Schemas for standard library value types that serialise as JSON scalars."""
    return {
        datetime: Schema(type=DataType.STRING, format="date-time"),
        date: Schema(type=DataType.STRING, format="date"),
        time: Schema(type=DataType.STRING, format="time"),
        UUID: Schema(type=DataType.STRING, format="uuid"),
        Decimal: Schema(type=DataType.NUMBER),
        bytes: Schema(type=DataType.STRING, format="byte"),
    }


def _coalesce(schema: Schema, attribute: str, value: Any) -> None:
    """Set ``attribute`` only when the caller-supplied starting schema left it empty."""
    if getattr(schema, attribute) is None:
        setattr(schema, attribute, value)


def _reference(schema: Schema | None) -> Schema | None:
    return None if schema is None else schema.as_reference()


def _infer_value_type(values: list[Any]) -> DataType | None:
    if not values:
        return None
    if all(isinstance(value, bool) for value in values):
        return DataType.BOOLEAN
    if all(isinstance(value, str) for value in values):
        return DataType.STRING
    if all(isinstance(value, int) and not isinstance(value, bool) for value in values):
        return DataType.INTEGER
    if all(isinstance(value, (int, float)) and not isinstance(value, bool) for value in values):
        return DataType.NUMBER
    return None


class SchemaBuilder:
    """Builds and caches schemas for types, promoting structs and named types.

    ``build`` is idempotent: every type is built once and the same node is
    returned afterwards. Promoted types are registered under a name before
    their fields are visited, so self-referencing types end in a ``$ref``.
    """

    def __init__(
        self,
        *,
        nullable_is_optional: bool = False,
        optional_is_nullable: bool = False,
    ) -> None:
        self.nullable_is_optional = nullable_is_optional
        self.optional_is_nullable = optional_is_nullable
        self.full_schemas: dict[Any, Schema] = default_full_schemas()
        self.base_schemas: dict[Any, Schema] = {}
        self.collisions: dict[Any, Schema] = {}
        self._schemas: dict[Any, Schema | None] = {}
        self._named: dict[str, Any] = {}

    def set_full_schema(self, tp: Any, schema: Schema) -> None:
        """Use ``schema`` verbatim for ``tp``. Register before building."""
        self.full_schemas[tp] = schema

    def set_base_schema(self, tp: Any, schema: Schema) -> None:
        """Start ``tp``'s schema from ``schema`` and fill the rest by introspection."""
        self.base_schemas[tp] = schema

    def build(self, tp: Any) -> Schema | None:
        """Return the schema for ``tp``, or ``None`` when the type cannot be serialised."""
        tp = strip_annotated(tp)
        if tp in self._schemas:
            return self._schemas[tp]

        schema = self._build(tp)
        return self._schemas.setdefault(tp, schema)

    def named_schemas(self) -> dict[str, Schema]:
        """Promoted schemas by name, excluding unresolved collisions."""
        return {name: self._schemas[tp] for name, tp in sorted(self._named.items())}

    def components(self) -> dict[str, Any]:
        """Render the named schemas as an OpenAPI ``components`` object."""
        return {"schemas": {name: schema.to_dict() for name, schema in self.named_schemas().items()}}

    def _build(self, tp: Any) -> Schema | None:
        inner, optional = unwrap_optional(tp)
        if optional:
            inner_schema = self.build(inner)
            if inner_schema is None:
                return None
            return self._make_nullable(inner_schema)

        kind = kind_of(tp)
        promote = kind in (Kind.STRUCT, Kind.ENUM) or has_custom_name(tp)
        introspect = True

        starting = self.full_schemas.get(tp)
        if starting is not None:
            introspect = False
        else:
            starting = self.base_schemas.get(tp)
        if starting is None:
            starting, full = get_custom_schema(tp)
            if starting is not None:
                promote = True
                introspect = not full

        if starting is None and kind is Kind.UNSUPPORTED:
            return None

        schema = starting.model_copy(deep=True) if starting is not None else Schema()
        if promote:
            self._register(tp, schema)
        if not introspect:
            return schema

        _coalesce(schema, "enum", get_enum(tp))
        _coalesce(schema, "example", get_example(tp))
        _coalesce(schema, "description", get_description(tp))

        if kind in _SCALAR_TYPES:
            _coalesce(schema, "type", _SCALAR_TYPES[kind])
        elif kind is Kind.ENUM:
            values = [member.value for member in tp]
            _coalesce(schema, "type", _infer_value_type(values))
            _coalesce(schema, "enum", values)
        elif kind is Kind.LITERAL:
            values = literal_values(tp)
            _coalesce(schema, "type", _infer_value_type(values))
            _coalesce(schema, "enum", values)
        elif kind in (Kind.LIST, Kind.SET):
            _coalesce(schema, "type", DataType.ARRAY)
            _coalesce(schema, "items", _reference(self.build(element_type(tp))))
            if kind is Kind.SET:
                schema.unique_items = True
        elif kind is Kind.TUPLE:
            self._build_tuple(schema, tp)
        elif kind is Kind.MAP:
            _coalesce(schema, "type", DataType.OBJECT)
            _coalesce(schema, "additional_properties", _reference(self.build(map_value_type(tp))))
        elif kind is Kind.UNION:
            members = [_reference(self.build(member)) for member in union_members(tp)]
            _coalesce(schema, "any_of", [member for member in members if member is not None])
        elif kind is Kind.STRUCT:
            self._build_struct(schema, tp)

        return schema

    def _build_tuple(self, schema: Schema, tp: Any) -> None:
        _coalesce(schema, "type", DataType.ARRAY)
        shape = tuple_shape(tp)
        if shape is None:
            _coalesce(schema, "items", _reference(self.build(element_type(tp))))
            return

        _coalesce(schema, "min_items", len(shape))
        _coalesce(schema, "max_items", len(shape))
        distinct = list(dict.fromkeys(shape))
        if len(distinct) == 1:
            _coalesce(schema, "items", _reference(self.build(distinct[0])))
            return
        members = [_reference(self.build(member)) for member in distinct]
        _coalesce(schema, "items", Schema(any_of=[member for member in members if member is not None]))

    def _build_struct(self, schema: Schema, tp: Any) -> None:
        _coalesce(schema, "type", DataType.OBJECT)
        _coalesce(schema, "required", [])
        if schema.properties is not None:
            return

        schema.properties = {}
        schema.additional_properties = False
        self._add_properties(schema, tp, parent_optional=False)

    def _add_properties(self, object_schema: Schema, tp: Any, *, parent_optional: bool) -> None:
        descriptor = describe(tp)
        if descriptor is None:
            return

        for item in descriptor.fields:
            optional = item.optional or parent_optional

            if item.embedded and item.descriptor is not None:
                self._add_properties(object_schema, item.concrete_type, parent_optional=optional)
                continue

            options = item.options
            force_required = bool(options.get("required"))
            property_schema = self.build(item.concrete_type if force_required else item.annotation)
            if property_schema is None:
                continue

            nullable = property_schema.is_nullable() or bool(options.get("nullable"))
            if optional and self.optional_is_nullable:
                nullable = True
            if nullable and self.nullable_is_optional:
                optional = True
            if force_required:
                optional = False
                nullable = False

            if nullable and not property_schema.is_nullable():
                property_schema = self._make_nullable(property_schema)

            if has_schema_overrides(options):
                if property_schema.name is not None:
                    property_schema = Schema(all_of=[property_schema.as_reference()])
                else:
                    property_schema = property_schema.model_copy()
                apply_options(property_schema, options)

            object_schema.properties[item.wire_name] = property_schema.as_reference()
            if not optional and item.wire_name not in object_schema.required:
                object_schema.required.append(item.wire_name)

    def _make_nullable(self, schema: Schema) -> Schema:
        """Return a schema accepting null as well; named schemas are wrapped, never changed."""
        null = Schema(type=DataType.NULL)
        if schema.name is not None:
            return Schema(one_of=[schema.as_reference(), null])
        if schema.all_of and len(schema.all_of) == 1:
            wrapped = schema.model_copy()
            wrapped.one_of = [schema.all_of[0], null]
            wrapped.all_of = None
            return wrapped
        wrapped = schema.model_copy()
        wrapped.nullable = True
        return wrapped

    def _register(self, tp: Any, schema: Schema) -> None:
        name = get_name(tp)
        owner = self._named.get(name)
        if owner is not None and owner != tp:
            qualified = get_qualified_name(tp)
            logger.debug("Schema name %s is taken by %r; using %s for %r", name, owner, qualified, tp)
            name = qualified
            owner = self._named.get(name)

        schema.set_name(name)
        self._schemas[tp] = schema
        if owner is not None and owner != tp:
            logger.warning("Schema name collision on %s for %r; excluded from named schemas", name, tp)
            self.collisions[tp] = schema
            return
        self._named[name] = tp


@lru_cache(maxsize=1)
def get_schema_builder() -> SchemaBuilder:
    """Process-wide builder configured from the environment."""
    settings = get_binder_settings()
    return SchemaBuilder(
        nullable_is_optional=settings.nullable_is_optional,
        optional_is_nullable=settings.optional_is_nullable,
    )
