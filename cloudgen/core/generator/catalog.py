"""
Feature catalog — every feature available to a generation run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from cloudgen.core.config.options import GenerationOptions
from cloudgen.core.generator.errors import SelectionError
from cloudgen.core.models.feature import Feature
from cloudgen.core.models.target import Target

logger = logging.getLogger(__name__)


class FeatureCatalog:
    """Registry of feature singletons, keyed by name."""

    def __init__(self, features: Iterable[Feature] = ()):
        self._features: dict[str, Feature] = {}
        for feature in features:
            self.register(feature)

    def register(self, feature: Feature) -> None:
        if not feature.name:
            raise ValueError(f"Feature {type(feature).__name__} has no name")
        if feature.name in self._features:
            logger.warning("Overwriting existing feature: %s", feature.name)
        self._features[feature.name] = feature

    def get(self, name: str) -> Feature | None:
        return self._features.get(name)

    def require(self, name: str) -> Feature:
        feature = self._features.get(name)
        if feature is None:
            raise SelectionError(f"Unknown feature: '{name}'")
        return feature

    def find(self, feature_type: type[Feature]) -> Feature | None:
        """First registered feature that is an instance of ``feature_type``."""
        for feature in self._features.values():
            if isinstance(feature, feature_type):
                return feature
        return None

    def defaults(self, options: GenerationOptions) -> list[Feature]:
        return [
            f for f in self._features.values()
            if f.default and f.supports(options)
        ]

    def for_target(self, target: Target) -> list[Feature]:
        return [f for f in self._features.values() if f.target is target]

    @property
    def names(self) -> list[str]:
        return sorted(self._features)

    def __contains__(self, name: object) -> bool:
        return name in self._features

    def __iter__(self):
        return iter(sorted(self._features.values(), key=lambda f: f.name))

    def __len__(self) -> int:
        return len(self._features)
