"""Validation failure payloads produced by the validator."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class ValidationRule(str, Enum):
    TYPE = "type"
    MULTIPLE_OF = "multipleOf"
    MAXIMUM = "maximum"
    MINIMUM = "minimum"
    MAX_LENGTH = "maxLength"
    MIN_LENGTH = "minLength"
    PATTERN = "pattern"
    FORMAT = "format"
    MAX_ITEMS = "maxItems"
    MIN_ITEMS = "minItems"
    UNIQUE_ITEMS = "uniqueItems"
    MAX_PROPERTIES = "maxProperties"
    MIN_PROPERTIES = "minProperties"
    REQUIRED = "required"
    DEPRECATED = "deprecated"
    ENUM = "enum"
    NULLABLE = "nullable"
    ONE_OF = "oneOf"
    ALL_OF = "allOf"
    ANY_OF = "anyOf"
    NOT = "not"
    CUSTOM = "custom"


class ValidationFailure(BaseModel):
    """Single rule violation found while validating a value against a schema."""

    model_config = ConfigDict(populate_by_name=True)

    path: list[str] | None = None
    rule: ValidationRule
    schema_name: str | None = Field(default=None, alias="schema")
    message: str = ""
