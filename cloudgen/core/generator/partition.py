"""
Feature partitioner — split one feature set into per-target subsets.

Flow:
    all features → drop foreign families → classify neutral features
                 → build one subset per target → compute the shared subset

Every concrete target receives its own target-scoped features plus
every default and explicitly selected neutral feature, so the modules
stay independently buildable. The shared (lib) module receives the
neutral features no target claimed, plus build tooling and shared
services, which it always needs.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Literal

from cloudgen.core.generator.errors import SelectionError
from cloudgen.core.models.feature import Feature, FeatureRole
from cloudgen.core.models.target import Target

logger = logging.getLogger(__name__)

SlotPolicy = Literal["keep_first", "reject"]

# Roles a feature can have and still be kept in the shared module after
# being added to a target.
_ALWAYS_SHARED = (FeatureRole.BUILD_PLUGIN, FeatureRole.SHARED_SERVICE)

# Roles that are never copied into target subsets as defaults.
_NOT_DEFAULT = (FeatureRole.BUILD, FeatureRole.FUNCTION_RUNTIME)


@dataclass
class FeatureSlot:
    """An optional single-feature slot.

    Policies:
        keep_first  the first offered feature stays, later ones are ignored
        reject      offering a second, different feature is an error
    """

    role: FeatureRole
    policy: SlotPolicy = "keep_first"
    feature: Feature | None = None

    def offer(self, feature: Feature) -> None:
        if self.feature is None:
            self.feature = feature
            return
        if self.feature is feature or self.feature.name == feature.name:
            return
        if self.policy == "reject":
            raise SelectionError(
                f"Only one {self.role.value} feature is allowed, got "
                f"'{self.feature.name}' and '{feature.name}'"
            )
        logger.debug(
            "Ignoring %s feature '%s', slot already holds '%s'",
            self.role.value, feature.name, self.feature.name,
        )


@dataclass
class FeaturePartition:
    """Features grouped by the target they apply to."""

    by_target: dict[Target, list[Feature]] = field(default_factory=dict)
    shared: list[Feature] = field(default_factory=list)

    @property
    def active_targets(self) -> frozenset[Target]:
        return frozenset(self.by_target) | {Target.SHARED}

    @property
    def concrete_targets(self) -> list[Target]:
        return sorted(
            (t for t in self.by_target if not t.is_shared),
            key=lambda t: t.value,
        )

    @property
    def is_platform_independent(self) -> bool:
        return self.active_targets == frozenset({Target.SHARED})

    def features_for(self, target: Target) -> list[Feature]:
        """Apply list for a target, sorted by apply order.

        For ``SHARED`` this merges features bound to ``SHARED`` with the
        shared subset.
        """
        if target.is_shared:
            return _sorted(_unique([*self.by_target.get(Target.SHARED, []), *self.shared]))
        return _sorted(self.by_target.get(target, []))

    def names(self, target: Target) -> list[str]:
        return [f.name for f in self.features_for(target)]


def partition_features(
    features: Iterable[Feature],
    selected_names: Collection[str],
    propagation: Mapping[str, Collection[Target]],
    slot_policy: SlotPolicy = "keep_first",
) -> FeaturePartition:
    """Split a flat feature set into per-target subsets.

    Args:
        features: Every feature of the run: selected, default and added.
        selected_names: Names the user explicitly asked for.
        propagation: Feature name → targets the feature was added to.
        slot_policy: Policy for the application and database-driver slots.

    Returns:
        FeaturePartition with per-target and shared subsets.
    """
    all_features = _unique(sorted(features, key=lambda f: f.name))

    initial_targets = {f.target for f in all_features if f.target is not None}

    defaults: list[Feature] = []
    specified: list[Feature] = []
    application = FeatureSlot(FeatureRole.APPLICATION, slot_policy)
    database_driver = FeatureSlot(FeatureRole.DATABASE_DRIVER, slot_policy)
    by_target: dict[Target, list[Feature]] = {}
    kept: list[Feature] = []

    for feature in all_features:
        if feature.family is not None and feature.family not in initial_targets:
            logger.debug(
                "Dropping '%s': no %s feature selected",
                feature.name, feature.family.value,
            )
            continue
        kept.append(feature)

        if feature.is_target_scoped:
            by_target.setdefault(feature.target, []).append(feature)
            continue

        if feature.default and not any(feature.has_role(r) for r in _NOT_DEFAULT):
            defaults.append(feature)
        if feature.has_role(FeatureRole.APPLICATION):
            application.offer(feature)
        if feature.has_role(FeatureRole.DATABASE_DRIVER):
            database_driver.offer(feature)
        if feature.name in selected_names:
            specified.append(feature)

        for target in sorted(propagation.get(feature.name, ()), key=lambda t: t.value):
            by_target.setdefault(target, []).append(feature)

    common = [*defaults, *specified]
    for slot in (application, database_driver):
        if slot.feature is not None:
            common.append(slot.feature)

    for target, subset in by_target.items():
        if target.is_shared:
            # the shared module gets its common features from shared_features()
            continue
        by_target[target] = _unique([*subset, *common])

    partition = FeaturePartition(
        by_target=by_target,
        shared=shared_features(kept, propagation),
    )

    logger.debug(
        "Partitioned %d features into targets %s",
        len(all_features),
        sorted(t.value for t in partition.active_targets),
    )
    return partition


def shared_features(
    features: Iterable[Feature],
    propagation: Mapping[str, Collection[Target]],
) -> list[Feature]:
    """Neutral features that belong in the shared module.

    A feature added to at least one concrete target is left out, unless
    it is build tooling or a shared service.
    """
    shared = []
    for feature in features:
        if feature.is_target_scoped:
            continue
        if any(feature.has_role(r) for r in _ALWAYS_SHARED):
            shared.append(feature)
            continue
        added_to = [t for t in propagation.get(feature.name, ()) if not t.is_shared]
        if not added_to:
            shared.append(feature)
    return _sorted(_unique(shared))


def _unique(features: Iterable[Feature]) -> list[Feature]:
    seen: dict[str, Feature] = {}
    for feature in features:
        seen.setdefault(feature.name, feature)
    return list(seen.values())


def _sorted(features: Iterable[Feature]) -> list[Feature]:
    return sorted(features, key=lambda f: (f.order, f.name))
