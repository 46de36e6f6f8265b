"""Shared pytest fixtures for schemabind test suites."""

from collections.abc import Generator
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(autouse=True)
def reset_process_defaults() -> Generator[None, None, None]:
    """Rebuild settings, the default builder and the registry for every test."""
    from schemabind.builder.schema_builder import get_schema_builder
    from schemabind.core.config import get_binder_settings
    from schemabind.validation.validator import get_validation_registry

    for getter in (get_binder_settings, get_schema_builder, get_validation_registry):
        getter.cache_clear()
    yield
    for getter in (get_binder_settings, get_schema_builder, get_validation_registry):
        getter.cache_clear()


@pytest.fixture
def builder():
    """Provide an isolated schema builder with default couplings."""
    from schemabind.builder.schema_builder import SchemaBuilder

    return SchemaBuilder()
