"""Validation cursor, per-type options and the shared failure collector."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any
from typing import Protocol

from schemabind.core.config import get_binder_settings
from schemabind.schemas.validation import ValidationFailure
from schemabind.schemas.validation import ValidationRule


@dataclass(frozen=True)
class ValidationOptions:
    """Options for validating values of one type."""

    skip: bool = False
    enforce_format: bool = False
    fail_deprecated: bool = False


class ValidationProvider(Protocol):
    def validation_options(self, tp: Any) -> ValidationOptions: ...


class ValidationRegistry:
    """Per-type validation options with a fallback for unregistered types."""

    def __init__(self, default: ValidationOptions | None = None) -> None:
        self.default = default or ValidationOptions()
        self._options: dict[Any, ValidationOptions] = {}

    def set_validation_options(self, tp: Any, options: ValidationOptions) -> None:
        self._options[tp] = options

    def validation_options(self, tp: Any) -> ValidationOptions:
        return self._options.get(tp, self.default)


class Validator:
    """Cursor over a value being validated.

    Cursors created with :meth:`next` share one failure list, so a failure added
    anywhere in the walk is visible to all of them. :meth:`detach` starts an
    independent list for isolated sub-passes.
    """

    def __init__(
        self,
        provider: ValidationProvider | None = None,
        *,
        path: list[str] | None = None,
        failures: list[ValidationFailure] | None = None,
    ) -> None:
        self.provider = provider if provider is not None else get_validation_registry()
        self.path = list(path) if path else []
        self.failures = failures if failures is not None else []

    def next(self, segment: str | int) -> Validator:
        """Child cursor one path segment deeper, sharing failures."""
        return Validator(self.provider, path=[*self.path, str(segment)], failures=self.failures)

    def add(self, failure: ValidationFailure) -> None:
        """Record a failure; one without a path gets the cursor's path."""
        if failure.path is None:
            failure = failure.model_copy(update={"path": list(self.path)})
        self.failures.append(failure)

    def fail(
        self,
        rule: ValidationRule,
        message: str = "",
        *,
        schema_name: str | None = None,
    ) -> None:
        self.add(ValidationFailure(rule=rule, message=message, schema_name=schema_name))

    def detach(self) -> Validator:
        """Cursor at the same path with its own failure list."""
        return Validator(self.provider, path=self.path, failures=[])

    def attach(self, detached: Validator) -> None:
        """Copy the failures of a detached cursor into this one."""
        self.failures.extend(detached.failures)

    def options_for(self, tp: Any) -> ValidationOptions:
        return self.provider.validation_options(tp)

    def is_valid(self) -> bool:
        return not self.failures

    def has_failures(self) -> bool:
        return bool(self.failures)


@lru_cache(maxsize=1)
def get_validation_registry() -> ValidationRegistry:
    """Process-wide options registry configured from the environment."""
    settings = get_binder_settings()
    return ValidationRegistry(ValidationOptions(enforce_format=settings.enforce_format))
