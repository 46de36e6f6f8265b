"""Binder and schema builder configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_MAX_ARRAY_INDEX = 10000
_TRUE_VALUES = frozenset({"1", "t", "true", "yes", "on"})


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw)


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class BinderSettings:
    """Runtime settings for schema building, binding and validation."""

    max_array_index: int
    nullable_is_optional: bool
    optional_is_nullable: bool
    enforce_format: bool

    def safe_for_logging(self) -> dict[str, int | bool]:
        """Return settings safe for logs."""
        return {
            "max_array_index": self.max_array_index,
            "nullable_is_optional": self.nullable_is_optional,
            "optional_is_nullable": self.optional_is_nullable,
            "enforce_format": self.enforce_format,
        }


@lru_cache(maxsize=1)
def get_binder_settings() -> BinderSettings:
    """Load binder settings from the environment."""
    return BinderSettings(
        max_array_index=_get_int_env("SCHEMABIND_MAX_ARRAY_INDEX", DEFAULT_MAX_ARRAY_INDEX),
        nullable_is_optional=_get_bool_env("SCHEMABIND_NULLABLE_IS_OPTIONAL", False),
        optional_is_nullable=_get_bool_env("SCHEMABIND_OPTIONAL_IS_NULLABLE", False),
        enforce_format=_get_bool_env("SCHEMABIND_ENFORCE_FORMAT", False),
    )
