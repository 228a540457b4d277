"""
Build model — dependencies, build plugins, build properties.

Dependencies and plugins may be declared by artifact id only and looked
up through a ``CoordinateResolver``. Lookup happens once, when the item is
added to a module; a missing coordinate is fatal for the run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from cloudgen.core.generator.errors import CoordinateNotFoundError
from cloudgen.core.models.target import Target

logger = logging.getLogger(__name__)


class BuildTool(str, Enum):
    """The two plugin families: script-style and declarative-manifest-style."""

    GRADLE = "gradle"
    MAVEN = "maven"

    @property
    def is_gradle(self) -> bool:
        return self is BuildTool.GRADLE


class Coordinate(BaseModel):
    """A published artifact coordinate (group:artifact:version)."""

    model_config = ConfigDict(frozen=True)

    group_id: str
    artifact_id: str
    version: str | None = None

    def __str__(self) -> str:
        if self.version:
            return f"{self.group_id}:{self.artifact_id}:{self.version}"
        return f"{self.group_id}:{self.artifact_id}"


class CoordinateResolver(Protocol):
    """Turns a logical artifact id into a concrete coordinate."""

    def resolve(self, artifact_id: str) -> Coordinate:
        ...


class StaticCoordinateResolver:
    """Resolver backed by a fixed artifact-id → coordinate mapping."""

    def __init__(self, coordinates: Mapping[str, Coordinate] | None = None):
        self._coordinates = dict(coordinates or {})

    @classmethod
    def from_data(cls, data: Mapping[str, Mapping[str, str]]) -> StaticCoordinateResolver:
        """Build from ``{artifact_id: {group_id, version}}`` data."""
        coords = {
            artifact: Coordinate(
                group_id=entry["group_id"],
                artifact_id=artifact,
                version=entry.get("version"),
            )
            for artifact, entry in data.items()
        }
        return cls(coords)

    def add(self, coordinate: Coordinate) -> None:
        self._coordinates[coordinate.artifact_id] = coordinate

    def resolve(self, artifact_id: str) -> Coordinate:
        try:
            return self._coordinates[artifact_id]
        except KeyError:
            raise CoordinateNotFoundError(artifact_id) from None


# ═══════════════════════════════════════════════════════════════════
#  Dependencies
# ═══════════════════════════════════════════════════════════════════


class Dependency(BaseModel):
    """A module dependency.

    When ``lookup`` is set only ``artifact_id`` is meaningful; the group
    and version come from the resolver.
    """

    model_config = ConfigDict(frozen=True)

    artifact_id: str
    group_id: str = ""
    version: str | None = None
    scope: str = "compile"
    lookup: bool = False

    @classmethod
    def of(cls, coordinate: str, scope: str = "compile") -> Dependency:
        """Parse ``group:artifact[:version]``."""
        parts = coordinate.split(":")
        if len(parts) not in (2, 3):
            raise ValueError(f"Invalid dependency coordinate: {coordinate!r}")
        return cls(
            group_id=parts[0],
            artifact_id=parts[1],
            version=parts[2] if len(parts) == 3 else None,
            scope=scope,
        )

    @classmethod
    def lookup_of(cls, artifact_id: str, scope: str = "compile") -> Dependency:
        return cls(artifact_id=artifact_id, scope=scope, lookup=True)

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.group_id, self.artifact_id, self.scope)

    def resolved(self, resolver: CoordinateResolver) -> Dependency:
        coord = resolver.resolve(self.artifact_id)
        return self.model_copy(update={
            "group_id": coord.group_id,
            "version": self.version or coord.version,
            "lookup": False,
        })

    def __str__(self) -> str:
        base = f"{self.group_id}:{self.artifact_id}"
        return f"{base}:{self.version}" if self.version else base


class DependencyList:
    """Ordered, de-duplicated dependencies of one module."""

    def __init__(self, resolver: CoordinateResolver | None = None):
        self._resolver = resolver
        self._items: dict[tuple[str, str, str], Dependency] = {}

    def add(self, dependency: Dependency) -> None:
        if dependency.lookup:
            if self._resolver is None:
                raise CoordinateNotFoundError(dependency.artifact_id)
            dependency = dependency.resolved(self._resolver)
        if dependency.key in self._items:
            logger.debug("Dependency %s already present", dependency)
            return
        self._items[dependency.key] = dependency

    def __iter__(self):
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Dependency):
            return item.key in self._items
        if isinstance(item, str):
            return any(d.artifact_id == item for d in self._items.values())
        return False

    def to_list(self) -> list[str]:
        return [str(d) for d in self._items.values()]


# ═══════════════════════════════════════════════════════════════════
#  Build plugins
# ═══════════════════════════════════════════════════════════════════


class BuildPlugin(BaseModel):
    """A build-tool plugin.

    ``id`` is the plugin id for Gradle and the artifact id for Maven.
    ``lookup_artifact`` names the artifact to resolve when the plugin's
    coordinate is not known up front. ``target_specific`` overrides the
    shared-module propagation policy when set.
    """

    model_config = ConfigDict(frozen=True)

    build_tool: BuildTool
    id: str
    group_id: str | None = None
    version: str | None = None
    lookup_artifact: str | None = None
    target_specific: bool | None = None

    @classmethod
    def gradle(cls, plugin_id: str, version: str | None = None, **kwargs) -> BuildPlugin:
        return cls(build_tool=BuildTool.GRADLE, id=plugin_id, version=version, **kwargs)

    @classmethod
    def maven(
        cls,
        artifact_id: str,
        group_id: str | None = None,
        version: str | None = None,
        **kwargs,
    ) -> BuildPlugin:
        return cls(
            build_tool=BuildTool.MAVEN,
            id=artifact_id,
            group_id=group_id,
            version=version,
            **kwargs,
        )

    @property
    def requires_lookup(self) -> bool:
        return self.lookup_artifact is not None

    @property
    def key(self) -> str:
        return f"{self.id}:{self.version}" if self.version else self.id

    def resolved(self, resolver: CoordinateResolver) -> BuildPlugin:
        """Return a copy with the looked-up version and group filled in."""
        if not self.requires_lookup:
            return self
        coord = resolver.resolve(self.lookup_artifact)
        return self.model_copy(update={
            "version": coord.version,
            "group_id": self.group_id or coord.group_id,
            "lookup_artifact": None,
        })

    def __str__(self) -> str:
        return self.key


# ═══════════════════════════════════════════════════════════════════
#  Build properties
# ═══════════════════════════════════════════════════════════════════


class BuildProperties:
    """Build descriptor properties, kept per target.

    ``put`` writes a property into every active target; ``put_for`` into
    one target only.
    """

    def __init__(self, targets: Iterable[Target]):
        self._targets = sorted(set(targets) | {Target.SHARED}, key=lambda t: t.value)
        self._props: dict[Target, dict[str, str]] = {t: {} for t in self._targets}

    def put(self, key: str, value: str) -> None:
        for props in self._props.values():
            props[key] = value

    def put_for(self, target: Target, key: str, value: str) -> None:
        self._props.setdefault(target, {})[key] = value

    def get(self, key: str, target: Target = Target.SHARED) -> str | None:
        return self._props.get(target, {}).get(key)

    def properties(self, target: Target = Target.SHARED) -> dict[str, str]:
        return dict(self._props.get(target, {}))
