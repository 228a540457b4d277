"""
Application features — the application class, logging, database drivers.

The application class, its test and the logging configuration belong to
each target module. In the shared scope they are declared for the
default module, where the router drops them unless the build has a
single module.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

from cloudgen.core.models.build import Dependency
from cloudgen.core.models.feature import Feature, FeatureRole
from cloudgen.core.models.language import ApplicationRenderingContext, Language, TestFramework
from cloudgen.core.models.project import ProjectIdentity
from cloudgen.core.models.target import DEFAULT_MODULE

if TYPE_CHECKING:
    from cloudgen.core.generator.context import TargetContext


def _app_slot(ctx: TargetContext, key: str) -> tuple[str, str]:
    """Key and module of an application-only template for ctx's module."""
    if ctx.target.is_shared:
        return key, DEFAULT_MODULE
    return f"{key}-{ctx.module_name}", ctx.module_name


class Application(Feature):
    """The runnable application class and its smoke test."""

    name = "application"
    title = "Application"
    default = True
    order = -5
    roles = frozenset({FeatureRole.APPLICATION})

    def apply(self, ctx: TargetContext) -> None:
        project = ctx.project
        rendering = ctx.application_rendering_context(ctx.language)
        key, module = _app_slot(ctx, "application")
        ctx.add_language_template(
            key,
            "/{packagePath}/Application",
            {lang: partial(_application_source, lang, project, rendering) for lang in Language},
            module=module,
        )
        ctx.configuration.add_nested("micronaut.application.name", project.name)

        if ctx.generate_example_code:
            key, module = _app_slot(ctx, "applicationTest")
            ctx.add_test_template(
                module,
                key,
                ctx.test_source_path("/{packagePath}/ApplicationTest"),
                {
                    (Language.JAVA, TestFramework.JUNIT): partial(_junit_test, project),
                    (Language.KOTLIN, TestFramework.JUNIT): partial(_kotlin_junit_test, project),
                    (Language.GROOVY, TestFramework.SPOCK): partial(_spock_test, project),
                },
            )


class Logback(Feature):
    name = "logback"
    title = "Logback"
    default = True

    def apply(self, ctx: TargetContext) -> None:
        ctx.add_dependency(Dependency.lookup_of("logback-classic", scope="runtimeOnly"))
        key, module = _app_slot(ctx, "loggingConfig")
        ctx.add_resource_template(module, key, "src/main/resources/logback.xml", "logback.xml")


class _DatabaseDriver(Feature):
    roles = frozenset({FeatureRole.DATABASE_DRIVER})
    order = 15
    artifact = ""
    url = ""
    driver = ""

    def apply(self, ctx: TargetContext) -> None:
        ctx.add_dependency(Dependency.lookup_of("micronaut-jdbc-hikari"))
        ctx.add_dependency(Dependency.lookup_of(self.artifact, scope="runtimeOnly"))
        ctx.configuration.add_nested({
            "datasources.default.url": self.url,
            "datasources.default.driver-class-name": self.driver,
            "datasources.default.username": "sa",
            "datasources.default.password": "",
        })


class H2(_DatabaseDriver):
    name = "h2"
    title = "H2 Database"
    artifact = "h2"
    url = "jdbc:h2:mem:devDb;LOCK_TIMEOUT=10000;DB_CLOSE_ON_EXIT=FALSE"
    driver = "org.h2.Driver"


class Postgres(_DatabaseDriver):
    name = "postgres"
    title = "PostgreSQL"
    artifact = "postgresql"
    url = "jdbc:postgresql://localhost:5432/postgres"
    driver = "org.postgresql.Driver"


# ── Sources ─────────────────────────────────────────────────────


def _startup_chain(rendering: ApplicationRenderingContext, indent: str) -> str:
    calls = []
    if rendering.default_environment:
        calls.append(f'.defaultEnvironments("{rendering.default_environment}")')
    if rendering.eager_init_singleton:
        calls.append(".eagerInitSingletons(true)")
    calls.append(".start()")
    return "".join(f"\n{indent}{call}" for call in calls)


def _application_source(
    language: Language,
    project: ProjectIdentity,
    rendering: ApplicationRenderingContext,
) -> str:
    pkg = project.package_name
    if language is Language.KOTLIN:
        chain = _startup_chain(rendering, "        ")
        return (
            f"package {pkg}\n\n"
            "import io.micronaut.runtime.Micronaut\n\n"
            "fun main(args: Array<String>) {\n"
            f"    Micronaut.build(*args){chain}\n"
            "}\n"
        )
    if language is Language.GROOVY:
        chain = _startup_chain(rendering, "            ")
        return (
            f"package {pkg}\n\n"
            "import io.micronaut.runtime.Micronaut\n\n"
            "class Application {\n\n"
            "    static void main(String[] args) {\n"
            f"        Micronaut.build(args){chain}\n"
            "    }\n"
            "}\n"
        )
    chain = _startup_chain(rendering, "            ")
    return (
        f"package {pkg};\n\n"
        "import io.micronaut.runtime.Micronaut;\n\n"
        "public class Application {\n\n"
        "    public static void main(String[] args) {\n"
        f"        Micronaut.build(args){chain};\n"
        "    }\n"
        "}\n"
    )


def _junit_test(project: ProjectIdentity) -> str:
    return (
        f"package {project.package_name};\n\n"
        "import io.micronaut.runtime.EmbeddedApplication;\n"
        "import io.micronaut.test.extensions.junit5.annotation.MicronautTest;\n"
        "import org.junit.jupiter.api.Test;\n"
        "import jakarta.inject.Inject;\n\n"
        "import static org.junit.jupiter.api.Assertions.assertTrue;\n\n"
        "@MicronautTest\n"
        "class ApplicationTest {\n\n"
        "    @Inject\n"
        "    EmbeddedApplication<?> application;\n\n"
        "    @Test\n"
        "    void testItWorks() {\n"
        "        assertTrue(application.isRunning());\n"
        "    }\n"
        "}\n"
    )


def _kotlin_junit_test(project: ProjectIdentity) -> str:
    return (
        f"package {project.package_name}\n\n"
        "import io.micronaut.runtime.EmbeddedApplication\n"
        "import io.micronaut.test.extensions.junit5.annotation.MicronautTest\n"
        "import org.junit.jupiter.api.Assertions\n"
        "import org.junit.jupiter.api.Test\n"
        "import jakarta.inject.Inject\n\n"
        "@MicronautTest\n"
        "class ApplicationTest {\n\n"
        "    @Inject\n"
        "    lateinit var application: EmbeddedApplication<*>\n\n"
        "    @Test\n"
        "    fun testItWorks() {\n"
        "        Assertions.assertTrue(application.isRunning)\n"
        "    }\n"
        "}\n"
    )


def _spock_test(project: ProjectIdentity) -> str:
    return (
        f"package {project.package_name}\n\n"
        "import io.micronaut.runtime.EmbeddedApplication\n"
        "import io.micronaut.test.extensions.spock.annotation.MicronautTest\n"
        "import spock.lang.Specification\n"
        "import jakarta.inject.Inject\n\n"
        "@MicronautTest\n"
        "class ApplicationTest extends Specification {\n\n"
        "    @Inject\n"
        "    EmbeddedApplication<?> application\n\n"
        "    void 'test it works'() {\n"
        "        expect:\n"
        "        application.running\n"
        "    }\n"
        "}\n"
    )
