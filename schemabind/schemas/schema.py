"""Pydantic model for JSON-Schema / OpenAPI 3 schema nodes."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import PrivateAttr

SCHEMA_REFERENCE_PREFIX = "#/components/schemas/"


class DataType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    NULL = "null"


def escape_path_part(value: str) -> str:
    """Escape a value so it can be used as one JSON pointer segment."""
    return value.replace("~", "~0").replace("/", "~1")


class Schema(BaseModel):
    """A schema node.

    Scalar, array, object, composite and reference nodes share this one model;
    unset keywords stay ``None`` (or ``False`` for flags) and are omitted by
    :meth:`to_dict`.

    A node registered under a name by the builder is *named*. Named nodes are
    never modified after they are built; callers that need to decorate one
    use :meth:`as_reference` and wrap the reference instead.
    """

    model_config = ConfigDict(populate_by_name=True)

    ref: str | None = Field(default=None, alias="$ref")
    type: DataType | None = None
    title: str | None = None
    description: str | None = None
    multiple_of: int | float | None = Field(default=None, alias="multipleOf")
    maximum: int | float | None = None
    exclusive_maximum: bool = Field(default=False, alias="exclusiveMaximum")
    minimum: int | float | None = None
    exclusive_minimum: bool = Field(default=False, alias="exclusiveMinimum")
    max_length: int | None = Field(default=None, alias="maxLength")
    min_length: int | None = Field(default=None, alias="minLength")
    pattern: str | None = None
    max_items: int | None = Field(default=None, alias="maxItems")
    min_items: int | None = Field(default=None, alias="minItems")
    unique_items: bool = Field(default=False, alias="uniqueItems")
    max_properties: int | None = Field(default=None, alias="maxProperties")
    min_properties: int | None = Field(default=None, alias="minProperties")
    required: list[str] | None = None
    enum: list[Any] | None = None
    format: str | None = None
    default: Any = None
    all_of: list[Schema] | None = Field(default=None, alias="allOf")
    one_of: list[Schema] | None = Field(default=None, alias="oneOf")
    any_of: list[Schema] | None = Field(default=None, alias="anyOf")
    not_: Schema | None = Field(default=None, alias="not")
    items: Schema | None = None
    properties: dict[str, Schema] | None = None
    additional_properties: bool | Schema | None = Field(default=None, alias="additionalProperties")
    nullable: bool = False
    read_only: bool = Field(default=False, alias="readOnly")
    write_only: bool = Field(default=False, alias="writeOnly")
    example: Any = None
    deprecated: bool = False

    _name: str | None = PrivateAttr(default=None)
    _target: Schema | None = PrivateAttr(default=None)

    @property
    def name(self) -> str | None:
        """Registered name of this node, or of the node it refers to."""
        if self._target is not None:
            return self._target.name
        return self._name

    @property
    def is_named(self) -> bool:
        return self._name is not None

    def set_name(self, name: str) -> None:
        self._name = name

    def as_reference(self) -> Schema:
        """Return a ``$ref`` node pointing at this node if it is named, else the node itself."""
        if self._name is None:
            return self
        reference = Schema(ref=SCHEMA_REFERENCE_PREFIX + escape_path_part(self._name))
        reference._target = self
        return reference

    def resolve(self) -> Schema:
        """Follow reference handles to the concrete node."""
        schema = self
        while schema._target is not None:
            schema = schema._target
        return schema

    def is_nullable(self) -> bool:
        """Return whether the node already accepts null."""
        if self.nullable:
            return True
        return bool(self.one_of) and len(self.one_of) == 2 and self.one_of[1].type == DataType.NULL

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain JSON-compatible mapping."""
        return self.model_dump(mode="json", by_alias=True, exclude_defaults=True)
