"""
Tests for the feature partitioner — per-target subsets and the shared subset.
"""

import pytest

from cloudgen.core.generator.errors import SelectionError
from cloudgen.core.generator.partition import FeatureSlot, partition_features, shared_features
from cloudgen.core.models.feature import Feature, FeatureRole
from cloudgen.core.models.target import Target


def make(name, target=None, default=False, family=None, roles=(), order=0):
    """Build a one-off feature instance."""
    cls = type(name.title().replace("-", ""), (Feature,), {
        "name": name,
        "target": target,
        "default": default,
        "family": family,
        "roles": frozenset(roles),
        "order": order,
    })
    return cls()


def names(features):
    return [f.name for f in features]


class TestPartition:
    def test_no_target_features_is_platform_independent(self):
        features = [make("app", default=True), make("logging", default=True)]
        partition = partition_features(features, set(), {})
        assert partition.is_platform_independent
        assert partition.active_targets == frozenset({Target.SHARED})
        assert names(partition.features_for(Target.SHARED)) == ["app", "logging"]

    def test_single_target(self):
        features = [
            make("aws-metrics", target=Target.AWS),
            make("app", default=True, roles=[FeatureRole.APPLICATION]),
            make("logging", default=True),
        ]
        partition = partition_features(features, {"aws-metrics"}, {})
        assert partition.active_targets == frozenset({Target.SHARED, Target.AWS})
        assert names(partition.features_for(Target.AWS)) == ["app", "aws-metrics", "logging"]
        assert names(partition.shared) == ["app", "logging"]

    def test_feature_added_by_target_moves_out_of_shared(self):
        features = [
            make("gcp-streaming", target=Target.GCP),
            make("jackson"),
        ]
        partition = partition_features(features, {"gcp-streaming"}, {"jackson": {Target.GCP}})
        assert "jackson" in names(partition.features_for(Target.GCP))
        assert "jackson" not in names(partition.shared)

    def test_build_plugin_and_shared_service_always_shared(self):
        features = [
            make("oci-tracing", target=Target.OCI),
            make("jib", roles=[FeatureRole.BUILD_PLUGIN]),
            make("test-resources", roles=[FeatureRole.SHARED_SERVICE]),
        ]
        propagation = {"jib": {Target.OCI}, "test-resources": {Target.OCI}}
        partition = partition_features(features, {"oci-tracing"}, propagation)
        assert names(partition.shared) == ["jib", "test-resources"]
        assert names(partition.features_for(Target.OCI)) == ["jib", "oci-tracing", "test-resources"]

    def test_family_excluded_without_target(self):
        features = [
            make("gcp-streaming", target=Target.GCP),
            make("aws-lambda", default=True, family=Target.AWS),
        ]
        partition = partition_features(features, {"gcp-streaming"}, {})
        assert "aws-lambda" not in names(partition.shared)
        assert "aws-lambda" not in names(partition.features_for(Target.GCP))

    def test_family_kept_with_target(self):
        features = [
            make("aws-metrics", target=Target.AWS),
            make("aws-lambda", default=True, family=Target.AWS, roles=[FeatureRole.FUNCTION_RUNTIME]),
        ]
        partition = partition_features(features, {"aws-metrics"}, {})
        assert "aws-lambda" in names(partition.shared)
        # function runtimes are never copied into targets as defaults
        assert "aws-lambda" not in names(partition.features_for(Target.AWS))

    def test_build_feature_not_a_target_default(self):
        features = [
            make("azure-function", target=Target.AZURE),
            make("gradle", default=True, roles=[FeatureRole.BUILD]),
        ]
        partition = partition_features(features, {"azure-function"}, {})
        assert names(partition.features_for(Target.AZURE)) == ["azure-function"]
        assert names(partition.shared) == ["gradle"]

    def test_specified_feature_copied_to_every_target(self):
        features = [
            make("aws-metrics", target=Target.AWS),
            make("gcp-streaming", target=Target.GCP),
            make("h2", roles=[FeatureRole.DATABASE_DRIVER]),
        ]
        partition = partition_features(features, {"aws-metrics", "gcp-streaming", "h2"}, {})
        assert "h2" in names(partition.features_for(Target.AWS))
        assert "h2" in names(partition.features_for(Target.GCP))
        assert "h2" in names(partition.shared)

    def test_propagated_target_gets_subset(self):
        features = [make("aws-metrics", target=Target.AWS), make("helper")]
        partition = partition_features(features, {"aws-metrics"}, {"helper": {Target.OCI}})
        assert Target.OCI in partition.active_targets
        assert names(partition.features_for(Target.OCI)) == ["helper"]

    def test_shared_bound_features_merged_into_shared(self):
        features = [
            make("security", target=Target.SHARED),
            make("logging", default=True),
        ]
        partition = partition_features(features, set(), {})
        assert partition.is_platform_independent
        assert names(partition.features_for(Target.SHARED)) == ["logging", "security"]

    def test_apply_order(self):
        features = [
            make("aws-metrics", target=Target.AWS, order=10),
            make("app", default=True, order=-5),
            make("beta", default=True),
            make("alpha", default=True),
        ]
        partition = partition_features(features, {"aws-metrics"}, {})
        assert names(partition.features_for(Target.AWS)) == ["app", "alpha", "beta", "aws-metrics"]

    def test_concrete_targets_sorted(self):
        features = [
            make("oci-tracing", target=Target.OCI),
            make("aws-metrics", target=Target.AWS),
        ]
        partition = partition_features(features, set(), {})
        assert partition.concrete_targets == [Target.AWS, Target.OCI]


class TestSingleSlots:
    def test_keep_first_takes_first_by_name(self):
        features = [
            make("aws-metrics", target=Target.AWS),
            make("postgres", default=True, roles=[FeatureRole.DATABASE_DRIVER]),
            make("h2", default=True, roles=[FeatureRole.DATABASE_DRIVER]),
        ]
        slot = FeatureSlot(FeatureRole.DATABASE_DRIVER)
        for f in sorted(features, key=lambda f: f.name):
            if f.has_role(FeatureRole.DATABASE_DRIVER):
                slot.offer(f)
        assert slot.feature.name == "h2"

    def test_reject_policy_raises(self):
        features = [
            make("aws-metrics", target=Target.AWS),
            make("app-a", roles=[FeatureRole.APPLICATION]),
            make("app-b", roles=[FeatureRole.APPLICATION]),
        ]
        with pytest.raises(SelectionError, match="Only one application"):
            partition_features(features, {"aws-metrics"}, {}, slot_policy="reject")

    def test_slot_occupant_reaches_targets(self):
        features = [
            make("aws-metrics", target=Target.AWS),
            make("app", roles=[FeatureRole.APPLICATION]),
        ]
        partition = partition_features(features, {"aws-metrics"}, {})
        assert "app" in names(partition.features_for(Target.AWS))

    def test_same_feature_offered_twice(self):
        app = make("app", roles=[FeatureRole.APPLICATION])
        slot = FeatureSlot(FeatureRole.APPLICATION, policy="reject")
        slot.offer(app)
        slot.offer(app)
        assert slot.feature is app


class TestSharedFeatures:
    def test_target_scoped_never_shared(self):
        features = [make("aws-metrics", target=Target.AWS), make("logging")]
        assert names(shared_features(features, {})) == ["logging"]

    def test_propagated_to_shared_only_stays(self):
        features = [make("helper")]
        assert names(shared_features(features, {"helper": {Target.SHARED}})) == ["helper"]
