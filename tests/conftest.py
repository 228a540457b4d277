"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from cloudgen.core.config.options import BuildRequest, GenerationOptions
from cloudgen.core.data import DataRegistry
from cloudgen.core.generator.catalog import FeatureCatalog
from cloudgen.core.generator.context import GeneratorContext
from cloudgen.core.use_cases.generate import build_context
from cloudgen.features import default_catalog


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def registry() -> DataRegistry:
    """Data registry backed by the packaged catalogs."""
    return DataRegistry()


@pytest.fixture
def catalog() -> FeatureCatalog:
    return default_catalog()


@pytest.fixture
def build(catalog: FeatureCatalog, registry: DataRegistry) -> Callable[..., GeneratorContext]:
    """Build an applied context for ``com.example.demo``.

    Usage: ``build(["aws-cloudwatch"], application_type="function")``
    """

    def _build(features: list[str] | None = None, **options) -> GeneratorContext:
        request = BuildRequest(
            project="com.example.demo",
            features=features or [],
            options=GenerationOptions(**options),
        )
        return build_context(request, catalog, registry)

    return _build
