"""
Target-neutral services and the function runtime.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cloudgen.core.models.build import BuildPlugin, Dependency
from cloudgen.core.models.feature import Feature, FeatureRole
from cloudgen.core.models.target import ROOT_MODULE, Target
from cloudgen.core.models.template import TextTemplate

if TYPE_CHECKING:
    from cloudgen.core.config.options import GenerationOptions
    from cloudgen.core.generator.context import TargetContext


class SecurityOAuth2(Feature):
    """OAuth 2.0 login, configured once in the shared module."""

    name = "security-oauth2"
    title = "OAuth 2.0 Security"
    target = Target.SHARED
    order = 30

    def apply(self, ctx: TargetContext) -> None:
        ctx.add_dependency(Dependency.lookup_of("micronaut-security-oauth2"))
        ctx.configuration.add_nested({
            "micronaut.security.authentication": "idtoken",
            "micronaut.security.oauth2.clients.default.client-id": "${OAUTH_CLIENT_ID:xxx}",
            "micronaut.security.oauth2.clients.default.client-secret": "${OAUTH_CLIENT_SECRET:yyy}",
        })
        ctx.add_template("securityReadme", TextTemplate(
            module=ROOT_MODULE,
            path="SECURITY.md",
            content=(
                "# Security\n\n"
                "Set `OAUTH_CLIENT_ID` and `OAUTH_CLIENT_SECRET` before starting "
                "any of the generated applications.\n"
            ),
        ))


class SerializationJackson(Feature):
    name = "serialization-jackson"
    title = "Jackson Serialization"
    order = 5

    def apply(self, ctx: TargetContext) -> None:
        ctx.add_dependency(Dependency.of("io.micronaut.serde:micronaut-serde-jackson"))


class TestResources(Feature):
    """Containers started automatically for tests; runs once per build."""

    __test__ = False  # not a pytest test class

    name = "test-resources"
    title = "Test Resources"
    order = 40
    roles = frozenset({FeatureRole.SHARED_SERVICE})

    def apply(self, ctx: TargetContext) -> None:
        if ctx.options.build_tool.is_gradle:
            ctx.add_build_plugin(BuildPlugin.gradle("io.micronaut.test-resources", "4.0.3"))
        ctx.add_dependency(Dependency.lookup_of("micronaut-test-resources-client", scope="testResourcesService"))


class AwsLambda(Feature):
    """Function runtime for AWS Lambda behind API Gateway."""

    name = "aws-lambda"
    title = "AWS Lambda"
    default = True
    family = Target.AWS
    order = 5
    roles = frozenset({FeatureRole.FUNCTION_RUNTIME, FeatureRole.EAGER_INIT})

    def supports(self, options: GenerationOptions) -> bool:
        return options.is_function

    def apply(self, ctx: TargetContext) -> None:
        ctx.add_dependency(Dependency.lookup_of("micronaut-function-aws-api-proxy"))
        ctx.function_test_configuration.add_nested("micronaut.function.handler", "io.micronaut.function.aws.proxy.payload1.ApiGatewayProxyRequestEventFunction")
