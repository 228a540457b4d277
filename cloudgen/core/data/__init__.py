"""
Central data registry for static catalogs.

Loads the YAML catalogs shipped next to this module once at first
access and caches them for the instance lifetime. The generator never
hard-codes coordinates or plugin policy; it receives them from here.

Usage::

    from cloudgen.core.data import DataRegistry

    registry = DataRegistry()
    coords = registry.plugin_coordinates   # PluginCoordinateRegistry
    policy = registry.plugin_policy        # SharedPluginPolicy
"""

from __future__ import annotations

import logging
from functools import cached_property
from pathlib import Path

import yaml

from cloudgen.core.generator.plugins import PluginCoordinateRegistry, SharedPluginPolicy
from cloudgen.core.models.build import StaticCoordinateResolver

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).parent


def _load_yaml(relative_path: str, data_dir: Path | None = None) -> dict:
    """Load a YAML mapping relative to the data directory."""
    path = (data_dir or _DATA_DIR) / relative_path
    if not path.exists():
        logger.warning("Data file not found: %s", path)
        return {}
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        logger.warning("Data file %s is not a mapping, ignoring", path)
        return {}
    return data


class DataRegistry:
    """Registry for the static catalogs used by a generation run.

    Args:
        data_dir: Alternative directory holding the same YAML files.
    """

    def __init__(self, data_dir: Path | None = None):
        self._data_dir = data_dir

    @cached_property
    def plugin_coordinates(self) -> PluginCoordinateRegistry:
        """Plugin ``id:version`` → published coordinate."""
        data = _load_yaml("plugin_coordinates.yml", self._data_dir)
        registry = PluginCoordinateRegistry(
            data.get("coordinates") or {},
            version=data.get("version", 1),
        )
        logger.debug("Loaded %d plugin coordinates", len(registry))
        return registry

    @cached_property
    def plugin_policy(self) -> SharedPluginPolicy:
        """Which target plugins are copied into the shared module."""
        data = _load_yaml("plugin_policy.yml", self._data_dir)
        return SharedPluginPolicy(
            target_specific=frozenset(data.get("target_specific") or ()),
            already_present=frozenset(data.get("already_present") or ()),
            default_propagate=bool(data.get("default_propagate", True)),
        )

    @cached_property
    def coordinate_resolver(self) -> StaticCoordinateResolver:
        """Resolver for dependencies and plugins declared by artifact id."""
        data = _load_yaml("dependency_coordinates.yml", self._data_dir)
        resolver = StaticCoordinateResolver.from_data(data.get("coordinates") or {})
        logger.debug("Loaded dependency coordinates from catalog")
        return resolver
