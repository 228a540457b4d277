"""
Plugin aggregator — per-target build plugin sets.

Plugins added while a target module is being generated are stored for
that target and, unless they are target-specific, copied into the
shared module too: tooling used by any target must also appear in the
shared module's build description.

Which plugins are target-specific is a policy, loaded from data:

    target_specific    never copied (function-runtime build steps)
    already_present    never copied (the shared module declares them itself)
    default_propagate  what happens to every other plugin

A plugin's own ``target_specific`` flag overrides the policy lists.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from cloudgen.core.generator.errors import UnknownPluginCoordinateError
from cloudgen.core.models.build import BuildPlugin, BuildTool, CoordinateResolver
from cloudgen.core.models.target import Target

logger = logging.getLogger(__name__)

# Marker plugins that turn a Gradle module into an application or a library.
PLUGIN_APPLICATION = "io.micronaut.application"
PLUGIN_LIBRARY = "io.micronaut.library"
PLUGIN_SHADOW = "com.github.johnrengelman.shadow"


@dataclass(frozen=True)
class SharedPluginPolicy:
    """Decides whether a target plugin is also added to the shared module."""

    target_specific: frozenset[str] = frozenset()
    already_present: frozenset[str] = frozenset({PLUGIN_SHADOW, PLUGIN_APPLICATION, PLUGIN_LIBRARY})
    default_propagate: bool = True

    def include_in_shared(self, plugin: BuildPlugin) -> bool:
        if plugin.target_specific is not None:
            return not plugin.target_specific and plugin.id not in self.already_present
        if plugin.id in self.target_specific:
            return False
        if plugin.id in self.already_present:
            return False
        return self.default_propagate


class PluginCoordinateRegistry:
    """Versioned ``plugin-id:version`` → published coordinate lookup.

    Args:
        coordinates: Mapping of ``id:version`` keys to ``group:artifact:version``.
        version: Schema version of the data the mapping came from.
    """

    def __init__(self, coordinates: Mapping[str, str] | None = None, version: int = 1):
        self._coordinates = dict(coordinates or {})
        self.version = version

    def lookup(self, plugin_id: str, version: str) -> str:
        key = f"{plugin_id}:{version}"
        try:
            return self._coordinates[key]
        except KeyError:
            raise UnknownPluginCoordinateError(key) from None

    def __contains__(self, key: object) -> bool:
        return key in self._coordinates

    def __len__(self) -> int:
        return len(self._coordinates)


class PluginAggregator:
    """Collects build plugins per target and folds them into the shared module."""

    def __init__(
        self,
        resolver: CoordinateResolver,
        registry: PluginCoordinateRegistry | None = None,
        policy: SharedPluginPolicy | None = None,
    ):
        self._resolver = resolver
        self._registry = registry or PluginCoordinateRegistry()
        self._policy = policy or SharedPluginPolicy()
        self._plugins: dict[Target, dict[tuple[BuildTool, str], BuildPlugin]] = {}

    @property
    def policy(self) -> SharedPluginPolicy:
        return self._policy

    def add(self, scope: Target, plugin: BuildPlugin) -> BuildPlugin:
        """Add a plugin to ``scope``, resolving its coordinate if needed.

        Returns:
            The stored (resolved) plugin.
        """
        if plugin.requires_lookup:
            plugin = plugin.resolved(self._resolver)

        self._store(scope, plugin)

        if not scope.is_shared and self._policy.include_in_shared(plugin):
            self._store(Target.SHARED, plugin)

        return plugin

    def plugins(self, scope: Target) -> list[BuildPlugin]:
        """Plugins of one module, sorted by id."""
        return sorted(self._plugins.get(scope, {}).values(), key=lambda p: (p.build_tool.value, p.id))

    def function_shared_plugins(self) -> list[BuildPlugin]:
        """Shared view for function applications: every plugin of every
        module except the application marker."""
        merged: dict[tuple[BuildTool, str], BuildPlugin] = {}
        for scope in sorted(self._plugins, key=lambda t: t.value):
            for key, plugin in self._plugins[scope].items():
                if plugin.build_tool is BuildTool.GRADLE and plugin.id == PLUGIN_APPLICATION:
                    continue
                merged.setdefault(key, plugin)
        return sorted(merged.values(), key=lambda p: (p.build_tool.value, p.id))

    def scopes(self) -> list[Target]:
        return sorted(self._plugins, key=lambda t: t.value)

    def coordinates(self) -> list[str]:
        """Published coordinates of every versioned plugin in every module.

        Only Gradle plugins are listed. Plugins without a version are
        resolved by convention and skipped.

        Raises:
            UnknownPluginCoordinateError: For a versioned plugin with no
                known coordinate.
        """
        coords: set[str] = set()
        for scope_plugins in self._plugins.values():
            for plugin in scope_plugins.values():
                if plugin.build_tool is not BuildTool.GRADLE or plugin.version is None:
                    continue
                coords.add(self._registry.lookup(plugin.id, plugin.version))
        return sorted(coords)

    def _store(self, scope: Target, plugin: BuildPlugin) -> None:
        plugins = self._plugins.setdefault(scope, {})
        key = (plugin.build_tool, plugin.id)
        if key in plugins:
            logger.debug("Plugin %s already in %s", plugin.id, scope.value)
            return
        plugins[key] = plugin
        logger.debug("Added plugin %s to %s", plugin.key, scope.value)
