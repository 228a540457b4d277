"""
Generate use case — build request in, rendered multi-module project out.

Flow:
    load cloudgen.yml → resolve features → partition → apply per target
                      → register configuration files → render → write
"""

from __future__ import annotations

import logging
import stat
from dataclasses import dataclass, field
from pathlib import Path

from cloudgen.core.config.loader import ConfigError, load_request
from cloudgen.core.config.options import BuildRequest
from cloudgen.core.data import DataRegistry
from cloudgen.core.generator.catalog import FeatureCatalog
from cloudgen.core.generator.context import GeneratorContext
from cloudgen.core.generator.errors import GenerationError
from cloudgen.core.generator.selection import FeatureSelection
from cloudgen.core.models.project import ProjectIdentity
from cloudgen.core.models.template import GeneratedFile

logger = logging.getLogger(__name__)


@dataclass
class GenerateResult:
    """Result of a generation run."""

    request: BuildRequest | None = None
    context: GeneratorContext | None = None
    files: list[GeneratedFile] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self, include_content: bool = False) -> dict:
        return {
            "ok": self.ok,
            "error": self.error,
            "project": self.request.project if self.request else None,
            "summary": self.context.to_dict() if self.context else None,
            "files": [
                f.model_dump() if include_content else {"path": f.path, "reason": f.reason}
                for f in self.files
            ],
            "written": [str(p) for p in self.written],
        }


def build_context(
    request: BuildRequest,
    catalog: FeatureCatalog | None = None,
    registry: DataRegistry | None = None,
) -> GeneratorContext:
    """Resolve a request's features and apply them to a new context.

    Raises:
        GenerationError: On selection or apply failures.
    """
    if catalog is None:
        from cloudgen.features import default_catalog
        catalog = default_catalog()
    registry = registry or DataRegistry()

    selection = FeatureSelection(catalog, request.features, request.options)
    features = selection.resolve()

    try:
        project = ProjectIdentity.parse(request.project)
    except ValueError as e:
        raise GenerationError(f"Invalid project name '{request.project}': {e}") from e

    context = GeneratorContext(
        project=project,
        features=features,
        options=request.options,
        selected_names=request.features,
        propagation=selection.propagation,
        resolver=registry.coordinate_resolver,
        plugin_registry=registry.plugin_coordinates,
        plugin_policy=registry.plugin_policy,
    )
    context.apply_features()
    context.register_configuration_templates()
    return context


def run_generate(
    config_path: Path | None = None,
    request: BuildRequest | None = None,
    output_dir: Path | None = None,
    catalog: FeatureCatalog | None = None,
    registry: DataRegistry | None = None,
) -> GenerateResult:
    """Generate the project described by a build request.

    Args:
        config_path: Optional explicit path to cloudgen.yml.
        request: Already-loaded request; skips loading when given.
        output_dir: Directory to write files into; nothing is written if None.
        catalog: Feature catalog (default: built-in features).
        registry: Data registry (default: packaged catalogs).

    Returns:
        GenerateResult with the context and rendered files, or an error.
    """
    result = GenerateResult()

    try:
        result.request = request or load_request(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    try:
        context = build_context(result.request, catalog, registry)
        result.context = context
        # Fails on unknown plugin versions before anything is written
        context.build_plugin_coordinates()
        result.files = context.render()
    except GenerationError as e:
        logger.error("Generation failed: %s", e)
        result.error = str(e)
        return result
    except OSError as e:
        result.error = f"Cannot render templates: {e}"
        return result

    if output_dir is not None:
        try:
            result.written = write_files(result.files, output_dir)
        except OSError as e:
            result.error = f"Cannot write to {output_dir}: {e}"
            return result

    logger.info(
        "Generated %d files for '%s' (modules: %s)",
        len(result.files), result.request.project,
        context.module_names() or ["<root>"],
    )
    return result


def write_files(files: list[GeneratedFile], output_dir: Path) -> list[Path]:
    """Write rendered files below ``output_dir``."""
    written = []
    for f in files:
        target = output_dir / f.path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(f.content, encoding="utf-8")
        if f.executable:
            target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        written.append(target)
        logger.debug("Wrote %s", target)
    return written
