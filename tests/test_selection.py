"""
Tests for feature selection — catalog lookups, defaults, propagation.
"""

import pytest

from cloudgen.core.config.options import GenerationOptions
from cloudgen.core.generator.catalog import FeatureCatalog
from cloudgen.core.generator.errors import SelectionError
from cloudgen.core.generator.selection import FeatureSelection
from cloudgen.core.models.feature import Feature
from cloudgen.core.models.target import Target


class Helper(Feature):
    name = "helper"


class Wrapper(Feature):
    """Neutral feature that pulls in helper."""

    name = "wrapper"

    def process_selected(self, selection):
        selection.add_feature(selection.catalog.require("helper"), source=self)


class AwsThing(Feature):
    name = "aws-thing"
    target = Target.AWS

    def process_selected(self, selection):
        selection.add_feature(selection.catalog.require("wrapper"), source=self)


class GcpThing(Feature):
    name = "gcp-thing"
    target = Target.GCP

    def process_selected(self, selection):
        selection.add_feature(selection.catalog.require("helper"), source=self)


class FunctionOnly(Feature):
    name = "function-only"

    def supports(self, options):
        return options.is_function


@pytest.fixture
def small_catalog() -> FeatureCatalog:
    return FeatureCatalog([Helper(), Wrapper(), AwsThing(), GcpThing(), FunctionOnly()])


class TestCatalog:
    def test_require_unknown(self, small_catalog):
        with pytest.raises(SelectionError, match="Unknown feature"):
            small_catalog.require("nope")

    def test_names_sorted(self, small_catalog):
        assert small_catalog.names == ["aws-thing", "function-only", "gcp-thing", "helper", "wrapper"]

    def test_for_target(self, small_catalog):
        assert [f.name for f in small_catalog.for_target(Target.AWS)] == ["aws-thing"]

    def test_find_by_type(self, small_catalog):
        assert small_catalog.find(GcpThing).name == "gcp-thing"

    def test_default_catalog_defaults(self, catalog):
        names = sorted(f.name for f in catalog.defaults(GenerationOptions()))
        assert names == ["application", "gradle", "logback"]

    def test_default_catalog_function_defaults(self, catalog):
        names = sorted(f.name for f in catalog.defaults(GenerationOptions(application_type="function")))
        assert names == ["application", "aws-lambda", "gradle", "logback"]


class TestSelection:
    def test_resolve_sorted(self, small_catalog):
        selection = FeatureSelection(small_catalog, ["wrapper"])
        assert [f.name for f in selection.resolve()] == ["helper", "wrapper"]

    def test_target_source_propagates(self, small_catalog):
        selection = FeatureSelection(small_catalog, ["gcp-thing"])
        selection.resolve()
        assert selection.added_targets("helper") == frozenset({Target.GCP})

    def test_propagation_is_transitive(self, small_catalog):
        selection = FeatureSelection(small_catalog, ["aws-thing"])
        selection.resolve()
        assert selection.propagation == {
            "helper": frozenset({Target.AWS}),
            "wrapper": frozenset({Target.AWS}),
        }

    def test_neutral_selection_not_propagated(self, small_catalog):
        selection = FeatureSelection(small_catalog, ["wrapper"])
        selection.resolve()
        assert selection.propagation == {}

    def test_multiple_sources(self, small_catalog):
        selection = FeatureSelection(small_catalog, ["aws-thing", "gcp-thing"])
        selection.resolve()
        assert selection.added_targets("helper") == frozenset({Target.AWS, Target.GCP})

    def test_unsupported_selection_rejected(self, small_catalog):
        selection = FeatureSelection(small_catalog, ["function-only"])
        with pytest.raises(SelectionError, match="does not support"):
            selection.resolve()

    def test_unsupported_added_feature_skipped(self, small_catalog):
        selection = FeatureSelection(small_catalog, [])
        selection.add_feature(small_catalog.require("function-only"))
        assert not selection.is_selected("function-only")

    def test_unknown_selection(self, small_catalog):
        with pytest.raises(SelectionError):
            FeatureSelection(small_catalog, ["missing"]).resolve()

    def test_resolve_twice(self, small_catalog):
        selection = FeatureSelection(small_catalog, ["wrapper"])
        assert selection.resolve() == selection.resolve()

    def test_example_code_flag(self, small_catalog):
        selection = FeatureSelection(small_catalog, [], GenerationOptions(example_code=False))
        assert selection.generate_example_code is False

    def test_kafka_pulls_in_test_resources(self, catalog):
        selection = FeatureSelection(catalog, ["gcp-kafka"])
        names = [f.name for f in selection.resolve()]
        assert "serialization-jackson" in names
        assert "test-resources" in names
        assert selection.added_targets("test-resources") == frozenset({Target.GCP})
