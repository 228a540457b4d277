"""
Feature selection — resolve the user's choices into the full feature set.

Selected features pull in the features they depend on through
``process_selected``. When the requesting feature is bound to a target,
the added feature is recorded as propagated to that target; the
partitioner then applies it in that target's module instead of the
shared one.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable

from cloudgen.core.config.options import GenerationOptions
from cloudgen.core.generator.catalog import FeatureCatalog
from cloudgen.core.generator.errors import SelectionError
from cloudgen.core.models.feature import Feature
from cloudgen.core.models.target import Target

logger = logging.getLogger(__name__)


class FeatureSelection:
    """The features of one run and where they were added.

    Args:
        catalog: Available features.
        selected_names: Feature names the user asked for.
        options: Generation options.
    """

    def __init__(
        self,
        catalog: FeatureCatalog,
        selected_names: Iterable[str],
        options: GenerationOptions | None = None,
    ):
        self.catalog = catalog
        self.selected_names = list(dict.fromkeys(selected_names))
        self.options = options or GenerationOptions()
        self._features: dict[str, Feature] = {}
        self._added_by: dict[str, set[str]] = {}
        self._propagation: dict[str, set[Target]] = {}
        self._queue: deque[Feature] = deque()
        self._resolved = False

    @property
    def generate_example_code(self) -> bool:
        return self.options.example_code

    def resolve(self) -> list[Feature]:
        """Resolve selected, default and transitively added features.

        Returns:
            All features of the run, sorted by name.

        Raises:
            SelectionError: For unknown names or unsupported selections.
        """
        if self._resolved:
            return self.features

        for name in self.selected_names:
            feature = self.catalog.require(name)
            if not feature.supports(self.options):
                raise SelectionError(
                    f"Feature '{name}' does not support application type "
                    f"'{self.options.application_type}'"
                )
            self._enqueue(feature)

        for feature in self.catalog.defaults(self.options):
            self._enqueue(feature)

        while self._queue:
            feature = self._queue.popleft()
            feature.process_selected(self)

        self._resolved = True
        logger.info(
            "Resolved %d features from %d selected",
            len(self._features), len(self.selected_names),
        )
        return self.features

    def add_feature(self, feature: Feature, source: Feature | None = None) -> None:
        """Add ``feature`` on behalf of ``source``.

        When ``source`` is bound to a target, ``feature`` is propagated to
        that target. A neutral ``source`` passes on the targets it was
        itself propagated to.
        """
        if not feature.supports(self.options):
            logger.debug("Skipping unsupported feature '%s'", feature.name)
            return
        if source is not None and feature.target is None:
            if source.target is not None:
                self._propagation.setdefault(feature.name, set()).add(source.target)
            else:
                self._added_by.setdefault(feature.name, set()).add(source.name)
        self._enqueue(feature)

    def added_targets(self, feature: Feature | str) -> frozenset[Target]:
        name = feature if isinstance(feature, str) else feature.name
        return self.propagation.get(name, frozenset())

    @property
    def propagation(self) -> dict[str, frozenset[Target]]:
        """Feature name → targets it was added to, transitively."""
        result: dict[str, frozenset[Target]] = {}
        for name in sorted(set(self._propagation) | set(self._added_by)):
            targets = self._collect(name, set())
            if targets:
                result[name] = frozenset(targets)
        return result

    def _collect(self, name: str, seen: set[str]) -> set[Target]:
        if name in seen:
            return set()
        seen.add(name)
        targets = set(self._propagation.get(name, ()))
        for source in self._added_by.get(name, ()):
            targets |= self._collect(source, seen)
        return targets

    @property
    def features(self) -> list[Feature]:
        return sorted(self._features.values(), key=lambda f: f.name)

    def is_selected(self, name: str) -> bool:
        return name in self._features

    def _enqueue(self, feature: Feature) -> None:
        if feature.name in self._features:
            return
        self._features[feature.name] = feature
        self._queue.append(feature)
