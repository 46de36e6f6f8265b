"""Schema derivation, request value binding and validation for dataclass types."""

from schemabind.binding.binder import UnsupportedContentTypeError
from schemabind.binding.binder import bind_body
from schemabind.binding.binder import bind_form
from schemabind.binding.binder import bind_headers
from schemabind.binding.binder import bind_path
from schemabind.binding.binder import bind_query
from schemabind.binding.coerce import coerce
from schemabind.binding.decode import transfer
from schemabind.binding.tree import build_tree
from schemabind.builder.schema_builder import SchemaBuilder
from schemabind.builder.schema_builder import get_schema_builder
from schemabind.reflect.annotations import AnnotationError
from schemabind.reflect.descriptor import describe
from schemabind.reflect.descriptor import field
from schemabind.schemas.schema import DataType
from schemabind.schemas.schema import Schema
from schemabind.schemas.validation import ValidationFailure
from schemabind.schemas.validation import ValidationRule
from schemabind.validation.validate import validate
from schemabind.validation.validator import ValidationOptions
from schemabind.validation.validator import ValidationRegistry
from schemabind.validation.validator import Validator
from schemabind.validation.validator import get_validation_registry

__all__ = [
    "AnnotationError",
    "DataType",
    "Schema",
    "SchemaBuilder",
    "UnsupportedContentTypeError",
    "ValidationFailure",
    "ValidationOptions",
    "ValidationRegistry",
    "ValidationRule",
    "Validator",
    "bind_body",
    "bind_form",
    "bind_headers",
    "bind_path",
    "bind_query",
    "build_tree",
    "coerce",
    "describe",
    "field",
    "get_schema_builder",
    "get_validation_registry",
    "transfer",
    "validate",
]
