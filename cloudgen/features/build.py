"""
Build tooling — the build tool itself and build plugins.

The build tool features run in the shared module only and lay out the
multi-module build: the root settings file plus one build file per
module, rendered from each module's final dependencies and plugins.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

from cloudgen.core.generator.plugins import PLUGIN_APPLICATION, PLUGIN_LIBRARY, PLUGIN_SHADOW
from cloudgen.core.models.build import BuildPlugin, BuildTool
from cloudgen.core.models.feature import Feature, FeatureRole
from cloudgen.core.models.target import DEFAULT_MODULE, ROOT_MODULE, Target
from cloudgen.core.models.template import TextTemplate

if TYPE_CHECKING:
    from cloudgen.core.config.options import GenerationOptions
    from cloudgen.core.generator.context import GeneratorContext, TargetContext


class GradleBuild(Feature):
    name = "gradle"
    title = "Gradle"
    default = True
    order = -10
    roles = frozenset({FeatureRole.BUILD})

    def supports(self, options: GenerationOptions) -> bool:
        return options.build_tool is BuildTool.GRADLE

    def apply(self, ctx: TargetContext) -> None:
        generator = ctx.generator
        ctx.add_build_plugin(BuildPlugin.gradle(PLUGIN_SHADOW, "8.1.1"))
        ctx.add_build_plugin(BuildPlugin.gradle(
            PLUGIN_APPLICATION if ctx.is_platform_independent else PLUGIN_LIBRARY, "4.0.3",
        ))
        ctx.add_template("gradleSettings", TextTemplate(
            module=ROOT_MODULE,
            path="settings.gradle",
            content=partial(_settings_gradle, generator),
        ))
        for target in sorted(generator.targets, key=lambda t: t.value):
            module = DEFAULT_MODULE if target.is_shared else target.module_name
            key = "buildGradle" if target.is_shared else f"buildGradle-{target.module_name}"
            ctx.add_template(key, TextTemplate(
                module=module,
                path="build.gradle",
                content=partial(_build_gradle, generator, target),
            ))


class MavenBuild(Feature):
    name = "maven"
    title = "Maven"
    default = True
    order = -10
    roles = frozenset({FeatureRole.BUILD})

    def supports(self, options: GenerationOptions) -> bool:
        return options.build_tool is BuildTool.MAVEN

    def apply(self, ctx: TargetContext) -> None:
        ctx.add_build_plugin(BuildPlugin.maven(
            "micronaut-maven-plugin", group_id="io.micronaut.maven", version="4.0.0",
        ))
        ctx.add_template("mavenPom", TextTemplate(
            module=ROOT_MODULE,
            path="pom.xml",
            content=partial(_root_pom, ctx.generator),
        ))


class Jib(Feature):
    """Container image build without a Docker daemon."""

    name = "jib"
    title = "Jib"
    order = 50
    roles = frozenset({FeatureRole.BUILD_PLUGIN})

    def supports(self, options: GenerationOptions) -> bool:
        return options.build_tool is BuildTool.GRADLE

    def apply(self, ctx: TargetContext) -> None:
        ctx.add_build_plugin(BuildPlugin.gradle(
            "com.google.cloud.tools.jib", lookup_artifact="jib-gradle-plugin",
        ))


# ── Build files ─────────────────────────────────────────────────


def _settings_gradle(generator: GeneratorContext) -> str:
    lines = [f'rootProject.name = "{generator.lib_project.name}"']
    for module in generator.module_names():
        lines.append(f'include("{module}")')
    return "\n".join(lines) + "\n"


def _build_gradle(generator: GeneratorContext, target: Target) -> str:
    plugins = [p for p in generator.build_plugins(target) if p.build_tool is BuildTool.GRADLE]
    if not target.is_shared:
        # target modules are applications built on top of lib
        plugins = [p for p in plugins if p.id != PLUGIN_LIBRARY]
    lines = ["plugins {"]
    if not target.is_shared:
        lines.append(f'    id("{PLUGIN_APPLICATION}")')
    for plugin in plugins:
        version = f' version "{plugin.version}"' if plugin.version else ""
        lines.append(f'    id("{plugin.id}"){version}')
    lines.append("}")
    lines.append("")

    props = generator.build_properties.properties(target)
    if props:
        lines.append("ext {")
        for key, value in sorted(props.items()):
            lines.append(f'    {key} = "{value}"')
        lines.append("}")
        lines.append("")

    lines.append("dependencies {")
    if not target.is_shared:
        lines.append('    implementation(project(":lib"))')
    for dep in generator.dependencies(target):
        scope = "implementation" if dep.scope == "compile" else dep.scope
        lines.append(f'    {scope}("{dep}")')
    lines.append("}")
    return "\n".join(lines) + "\n"


def _root_pom(generator: GeneratorContext) -> str:
    project = generator.lib_project
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        "<project>",
        "  <modelVersion>4.0.0</modelVersion>",
        f"  <groupId>{project.package_name}</groupId>",
        f"  <artifactId>{project.name}</artifactId>",
        "  <version>0.1</version>",
    ]
    modules = generator.module_names()
    if modules:
        lines.append("  <packaging>pom</packaging>")
        lines.append("  <modules>")
        lines.extend(f"    <module>{m}</module>" for m in modules)
        lines.append("  </modules>")
    lines.append("</project>")
    return "\n".join(lines) + "\n"
