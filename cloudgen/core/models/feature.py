"""
Feature model — units of generation logic.

A feature decides *what* goes into a module: settings, dependencies,
build plugins and templates. The generator decides *where* it lands.

Features are stateless singletons held by the catalog. To create one:
    1. Subclass Feature
    2. Set ``name`` (and ``target`` for target-scoped features)
    3. Override ``apply`` (and ``process_selected`` to pull in others)
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from cloudgen.core.models.target import Target

if TYPE_CHECKING:
    from cloudgen.core.config.options import GenerationOptions
    from cloudgen.core.generator.context import TargetContext
    from cloudgen.core.generator.selection import FeatureSelection


class FeatureRole(str, Enum):
    """Roles that change how the partitioner treats a feature."""

    BUILD = "build"                      # build tool itself, never a target default
    BUILD_PLUGIN = "build-plugin"        # always applied to the shared module
    SHARED_SERVICE = "shared-service"    # always applied to the shared module
    APPLICATION = "application"          # application identity, single slot
    DATABASE_DRIVER = "database-driver"  # single slot
    FUNCTION_RUNTIME = "function-runtime"
    EAGER_INIT = "eager-init"


class Feature:
    """Base class for all features.

    Class attributes:
        name:     Unique feature name.
        title:    Human-readable title.
        target:   Target the feature is bound to, or None when neutral.
        order:    Apply order; lower applies first.
        default:  Included even when not selected.
        family:   Target ecosystem the feature belongs to. Family members
                  are dropped unless a feature of that target is selected.
        roles:    Partitioning roles.
    """

    name: str = ""
    title: str = ""
    target: Target | None = None
    order: int = 0
    default: bool = False
    family: Target | None = None
    roles: frozenset[FeatureRole] = frozenset()

    @property
    def is_target_scoped(self) -> bool:
        return self.target is not None

    def has_role(self, role: FeatureRole) -> bool:
        return role in self.roles

    def supports(self, options: GenerationOptions) -> bool:
        """Whether the feature applies to the requested application."""
        return True

    def process_selected(self, selection: FeatureSelection) -> None:
        """Add the features this one depends on."""

    def apply(self, ctx: TargetContext) -> None:
        """Contribute settings, dependencies, plugins and templates."""

    def __repr__(self) -> str:
        scope = f"@{self.target.value}" if self.target else ""
        return f"<{type(self).__name__} {self.name}{scope}>"
