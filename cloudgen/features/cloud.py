"""
Cloud services — features bound to one deployment target.

Each of these lives in its target's module only; selecting any of them
turns the build into a multi-module one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cloudgen.core.models.build import BuildPlugin, Dependency
from cloudgen.core.models.feature import Feature
from cloudgen.core.models.target import DEFAULT_MODULE, Target

if TYPE_CHECKING:
    from cloudgen.core.config.options import GenerationOptions
    from cloudgen.core.generator.context import TargetContext
    from cloudgen.core.generator.selection import FeatureSelection


class AwsCloudWatch(Feature):
    """Metrics export to CloudWatch."""

    name = "aws-cloudwatch"
    title = "AWS CloudWatch Metrics"
    target = Target.AWS
    order = 10

    def apply(self, ctx: TargetContext) -> None:
        ctx.add_dependency(Dependency.lookup_of("micronaut-aws-cloudwatch"))
        ctx.configuration.add_nested({
            "micronaut.metrics.enabled": True,
            "micronaut.metrics.export.cloudwatch.enabled": True,
            "micronaut.metrics.export.cloudwatch.namespace": ctx.project.name,
        })
        # no AWS credentials when running tests
        ctx.test_configuration.add_nested("micronaut.metrics.export.cloudwatch.enabled", False)


class GcpKafka(Feature):
    """Managed Kafka streaming on Google Cloud."""

    name = "gcp-kafka"
    title = "Kafka Streaming (GCP)"
    target = Target.GCP
    order = 10

    def process_selected(self, selection: FeatureSelection) -> None:
        for name in ("serialization-jackson", "test-resources"):
            feature = selection.catalog.get(name)
            if feature is not None:
                selection.add_feature(feature, source=self)

    def apply(self, ctx: TargetContext) -> None:
        ctx.add_dependency(Dependency.lookup_of("micronaut-kafka"))
        ctx.configuration.add_nested("kafka.bootstrap.servers", "localhost:9092")
        ctx.configuration.add_nested("kafka.health.enabled", False)
        ctx.test_configuration.add_nested("kafka.enabled", True)


class OciTracing(Feature):
    """Distributed tracing exported to a Zipkin endpoint on OCI."""

    name = "oci-tracing"
    title = "OCI Application Performance Monitoring"
    target = Target.OCI
    order = 10

    def apply(self, ctx: TargetContext) -> None:
        ctx.add_dependency(Dependency.lookup_of("micronaut-tracing-opentelemetry-zipkin-exporter"))
        ctx.configuration.add_nested({
            "otel.traces.exporter": "zipkin",
            "otel.exporter.zipkin.url": "https://apm.example.oraclecloud.com/20200101/observations/public-span",
        })


class _Kubernetes(Feature):
    order = 20

    def apply(self, ctx: TargetContext) -> None:
        ctx.add_dependency(Dependency.lookup_of("micronaut-kubernetes-client"))
        ctx.bootstrap_configuration.add_nested("micronaut.application.name", ctx.project.name)
        ctx.bootstrap_configuration.add_nested("micronaut.config-client.enabled", True)
        # One cluster manifest for the whole build; first target wins
        ctx.add_resource_template(DEFAULT_MODULE, "k8sYaml", "k8s.yml", "k8s.yml")
        ctx.add_post_processor("k8sYaml", _substitute_name(ctx.generator.lib_project.name))


class AwsKubernetes(_Kubernetes):
    name = "kubernetes-aws"
    title = "Kubernetes on EKS"
    target = Target.AWS


class AzureKubernetes(_Kubernetes):
    name = "kubernetes-azure"
    title = "Kubernetes on AKS"
    target = Target.AZURE


class AzureFunction(Feature):
    """HTTP-triggered Azure Function."""

    name = "azure-function"
    title = "Azure Function"
    target = Target.AZURE
    order = 5

    def supports(self, options: GenerationOptions) -> bool:
        return options.is_function

    def apply(self, ctx: TargetContext) -> None:
        ctx.add_dependency(Dependency.lookup_of("micronaut-azure-function-http"))
        if ctx.options.build_tool.is_gradle:
            ctx.add_build_plugin(BuildPlugin.gradle("com.microsoft.azure.azurefunctions"))
        else:
            ctx.add_build_plugin(BuildPlugin.maven(
                "azure-functions-maven-plugin", group_id="com.microsoft.azure",
            ))
        ctx.put_build_property("azureFunctionAppName", ctx.generator.lib_project.name)
        ctx.function_test_configuration.add_nested("micronaut.function.name", ctx.project.name)


def _substitute_name(name: str):
    def process(content: str) -> str:
        return content.replace("{name}", name)
    return process
