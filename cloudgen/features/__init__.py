"""
Built-in features.

    from cloudgen.features import default_catalog

    catalog = default_catalog()
    catalog.require("aws-cloudwatch")
"""

from __future__ import annotations

from cloudgen.core.generator.catalog import FeatureCatalog
from cloudgen.features.application import H2, Application, Logback, Postgres
from cloudgen.features.build import GradleBuild, Jib, MavenBuild
from cloudgen.features.cloud import (
    AwsCloudWatch,
    AwsKubernetes,
    AzureFunction,
    AzureKubernetes,
    GcpKafka,
    OciTracing,
)
from cloudgen.features.services import (
    AwsLambda,
    SecurityOAuth2,
    SerializationJackson,
    TestResources,
)

BUILTIN_FEATURES = (
    Application,
    AwsCloudWatch,
    AwsKubernetes,
    AwsLambda,
    AzureFunction,
    AzureKubernetes,
    GcpKafka,
    GradleBuild,
    H2,
    Jib,
    Logback,
    MavenBuild,
    OciTracing,
    Postgres,
    SecurityOAuth2,
    SerializationJackson,
    TestResources,
)


def default_catalog() -> FeatureCatalog:
    """A fresh catalog holding one instance of every built-in feature."""
    return FeatureCatalog(feature_cls() for feature_cls in BUILTIN_FEATURES)


__all__ = ["BUILTIN_FEATURES", "default_catalog"]
