"""
Generator context — one logical build fanned out into per-target modules.

The context owns every piece of per-module state of a generation run:
configuration trees, dependencies, project identities, build plugins,
build properties and the registered templates. Features never touch
that state directly. Each one receives a ``TargetContext`` bound to the
target whose module it is contributing to, and every read or write
through it lands in that target's entries:

    GeneratorContext
      ├── partition      which features apply to which target
      ├── store          per-target configs, dependencies, projects
      ├── plugins        per-target build plugins, folded into lib
      └── router         template placement + de-duplication

Flow:
    partition → apply each concrete target (sorted) → apply SHARED
              → register configuration templates → render
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from cloudgen.core.config.options import GenerationOptions
from cloudgen.core.generator.errors import GenerationError, UnsupportedLanguageError
from cloudgen.core.generator.partition import FeaturePartition, SlotPolicy, partition_features
from cloudgen.core.generator.plugins import (
    PluginAggregator,
    PluginCoordinateRegistry,
    SharedPluginPolicy,
)
from cloudgen.core.generator.router import TemplateRouter
from cloudgen.core.generator.store import ScopedStore
from cloudgen.core.models.build import (
    BuildPlugin,
    BuildProperties,
    CoordinateResolver,
    Dependency,
    DependencyList,
    StaticCoordinateResolver,
)
from cloudgen.core.models.configuration import (
    ApplicationConfiguration,
    BootstrapConfiguration,
    Configuration,
)
from cloudgen.core.models.feature import Feature, FeatureRole
from cloudgen.core.models.language import ApplicationRenderingContext, Language, TestFramework
from cloudgen.core.models.project import ProjectIdentity
from cloudgen.core.models.target import DEFAULT_MODULE, LIB_MODULE, Target
from cloudgen.core.models.template import (
    ConfigTemplate,
    GeneratedFile,
    ResourceTemplate,
    Template,
    TextTemplate,
)

logger = logging.getLogger(__name__)

PostProcessor = Callable[[str], str]

# Store keys
_CONFIG = "config"
_BOOTSTRAP = "bootstrap"
_DEPENDENCIES = "dependencies"
_PROJECT = "project"

# Build property holding the platform version; name depends on the build tool
_VERSION_PROPERTY = {"gradle": "platformVersion", "maven": "platform.version"}


class GeneratorContext:
    """State of one multi-target generation run.

    Args:
        project: Identity of the shared module (the user's project).
        features: Every feature of the run: selected, default and added.
        options: Generation options.
        selected_names: Feature names the user explicitly asked for.
        propagation: Feature name → targets the feature was added to.
        resolver: Coordinate resolver for lookup dependencies and plugins.
        plugin_registry: Published coordinates of versioned plugins.
        plugin_policy: Which target plugins are copied into lib.
        slot_policy: Policy for the application/database-driver slots.
    """

    def __init__(
        self,
        project: ProjectIdentity,
        features: Iterable[Feature],
        options: GenerationOptions | None = None,
        selected_names: Iterable[str] = (),
        propagation: Mapping[str, Iterable[Target]] | None = None,
        resolver: CoordinateResolver | None = None,
        plugin_registry: PluginCoordinateRegistry | None = None,
        plugin_policy: SharedPluginPolicy | None = None,
        slot_policy: SlotPolicy = "keep_first",
    ):
        self.options = options or GenerationOptions()
        self.resolver = resolver or StaticCoordinateResolver()
        self._features = list(features)
        self._propagation = {name: frozenset(ts) for name, ts in (propagation or {}).items()}

        self.partition: FeaturePartition = partition_features(
            self._features,
            set(selected_names),
            self._propagation,
            slot_policy=slot_policy,
        )
        self.targets: frozenset[Target] = self.partition.active_targets

        # The SHARED entries are the base store every target falls back from
        self.store = ScopedStore()
        self.store.get(Target.SHARED, _CONFIG, ApplicationConfiguration)
        self.store.get(Target.SHARED, _BOOTSTRAP, BootstrapConfiguration)
        self.store.get(Target.SHARED, _DEPENDENCIES, lambda: DependencyList(self.resolver))
        self.store.get(Target.SHARED, _PROJECT, lambda: project)

        self.plugins = PluginAggregator(self.resolver, plugin_registry, plugin_policy)
        self.router = TemplateRouter(self.is_platform_independent)
        self.build_properties = BuildProperties(self.targets)
        self.build_properties.put(
            _VERSION_PROPERTY[self.options.build_tool.value],
            self.options.platform_version,
        )

        self._post_processors: dict[str, list[PostProcessor]] = {}
        self._regex_post_processors: list[tuple[re.Pattern[str], PostProcessor]] = []
        self._applied = False

        logger.debug(
            "Generator context for '%s': targets=%s",
            project.name, sorted(t.value for t in self.targets),
        )

    # ── Targets ─────────────────────────────────────────────────

    @property
    def is_platform_independent(self) -> bool:
        """True when the build has no target modules, only the root."""
        return self.targets == frozenset({Target.SHARED})

    @property
    def concrete_targets(self) -> list[Target]:
        return self.partition.concrete_targets

    def module_names(self) -> list[str]:
        """Output module names: lib first, then target modules sorted.

        Empty for platform-independent builds (single root module).
        """
        if self.is_platform_independent:
            return []
        return [LIB_MODULE, *sorted(t.module_name for t in self.concrete_targets)]

    @property
    def generate_example_code(self) -> bool:
        return self.options.example_code

    def scope(self, target: Target) -> TargetContext:
        """Sub-context bound to ``target``; opens its stores on first use."""
        if not target.is_shared:
            self.store.get(target, _CONFIG, ApplicationConfiguration)
            self.store.get(target, _BOOTSTRAP, BootstrapConfiguration)
            self.store.get(target, _DEPENDENCIES, lambda: DependencyList(self.resolver))
            self.store.get(target, _PROJECT, lambda: self.lib_project.child(target.module_name))
        return TargetContext(self, target)

    # ── Apply ───────────────────────────────────────────────────

    def apply_features(self) -> None:
        """Apply every target's features, then the shared module's.

        Raises:
            GenerationError: If the features were already applied.
        """
        if self._applied:
            raise GenerationError("Features were already applied for this run")
        self._applied = True

        for target in [*self.concrete_targets, Target.SHARED]:
            ctx = self.scope(target)
            features = self.partition.features_for(target)
            logger.info(
                "Applying %d features to module '%s'",
                len(features), target.module_name,
            )
            for feature in features:
                logger.debug("Applying %s to %s", feature.name, target.value)
                feature.apply(ctx)

    @property
    def all_features(self) -> list[Feature]:
        """Every feature of the run, by name."""
        return sorted(self._features, key=lambda f: f.name)

    def features(self, target: Target) -> list[Feature]:
        """Features applied to ``target``'s module, in apply order."""
        return self.partition.features_for(target)

    # ── Configuration ───────────────────────────────────────────

    def configuration(self, target: Target = Target.SHARED) -> Configuration | None:
        return self.store.peek(target, _CONFIG)

    def bootstrap_configuration(self, target: Target = Target.SHARED) -> Configuration | None:
        return self.store.peek(target, _BOOTSTRAP)

    def environment_configurations(self, target: Target = Target.SHARED) -> dict[str, Configuration]:
        return self.store.environments(target, _CONFIG)

    def bootstrap_environment_configurations(self, target: Target = Target.SHARED) -> dict[str, Configuration]:
        return self.store.environments(target, _BOOTSTRAP)

    @property
    def lib_configuration(self) -> Configuration:
        return self.store.peek(Target.SHARED, _CONFIG)

    def target_configurations(self) -> dict[Target, Configuration]:
        """Default configuration of every concrete target module."""
        return {
            t: self.store.peek(t, _CONFIG)
            for t in self.store.targets(_CONFIG)
            if not t.is_shared
        }

    def extra_configurations(self) -> dict[Target, list[Configuration]]:
        """Environment overlays (application and bootstrap) per target."""
        extra: dict[Target, list[Configuration]] = {}
        for key in (_CONFIG, _BOOTSTRAP):
            for target in self.store.env_targets(key):
                extra.setdefault(target, []).extend(self.store.environments(target, key).values())
        return extra

    def _base_keys(self, target: Target) -> tuple[str, ...]:
        """Store keys of the default configurations written for ``target``.

        The lib module is a library, not an application: it gets no
        application or bootstrap configuration unless the build is
        platform independent.
        """
        if target.is_shared and not self.is_platform_independent:
            return ()
        return (_CONFIG, _BOOTSTRAP)

    def all_configurations(self) -> list[Configuration]:
        """Every configuration written to disk, environment overlays last."""
        configs: list[Configuration] = []
        for target in sorted(self.targets, key=lambda t: t.value):
            for key in self._base_keys(target):
                config = self.store.peek(target, key)
                if config is not None:
                    configs.append(config)
        for overlays in self.extra_configurations().values():
            configs.extend(overlays)
        return configs

    def register_configuration_templates(self) -> None:
        """Register one template per non-empty configuration of every module."""
        ext = self.options.config_extension
        for target in sorted(self.targets, key=lambda t: t.value):
            module = DEFAULT_MODULE if target.is_shared else target.module_name
            ctx = self.scope(target)
            configs = [
                *(self.store.peek(target, key) for key in self._base_keys(target)),
                *self.store.environments(target, _CONFIG).values(),
                *self.store.environments(target, _BOOTSTRAP).values(),
            ]
            for config in configs:
                if config is None or config.is_empty():
                    continue
                key = config.key if target.is_shared else f"{config.key}-{target.module_name}"
                ctx.add_template(key, ConfigTemplate(
                    module=module,
                    path=config.file_path(ext),
                    config=config,
                    format=self.options.config_format,
                ))

    # ── Dependencies, projects, plugins ─────────────────────────

    def dependencies(self, target: Target = Target.SHARED) -> list[Dependency]:
        deps = self.store.peek(target, _DEPENDENCIES)
        return list(deps) if deps is not None else []

    def project(self, target: Target = Target.SHARED) -> ProjectIdentity | None:
        return self.store.peek(target, _PROJECT)

    @property
    def lib_project(self) -> ProjectIdentity:
        return self.store.peek(Target.SHARED, _PROJECT)

    def target_projects(self) -> dict[Target, ProjectIdentity]:
        return {
            t: self.store.peek(t, _PROJECT)
            for t in self.store.targets(_PROJECT)
            if not t.is_shared
        }

    def build_plugins(self, target: Target = Target.SHARED) -> list[BuildPlugin]:
        """Plugins of one module.

        For function applications the shared module sees every plugin of
        every module except the application marker.
        """
        if target.is_shared and self.options.is_function:
            return self.plugins.function_shared_plugins()
        return self.plugins.plugins(target)

    def build_plugin_coordinates(self) -> list[str]:
        """Published coordinates of every versioned plugin, sorted.

        Raises:
            UnknownPluginCoordinateError: For an unknown plugin/version pair.
        """
        return self.plugins.coordinates()

    # ── Templates ───────────────────────────────────────────────

    @property
    def templates(self) -> dict[str, Template]:
        return self.router.templates

    def add_template(self, key: str, template: Template, scope: Target = Target.SHARED) -> bool:
        return self.router.register(key, template, scope)

    def remove_template(self, key: str) -> None:
        self.router.unregister(key)

    def add_post_processor(self, key: str | re.Pattern[str], processor: PostProcessor) -> None:
        """Register a content processor for a template key or a path pattern."""
        if isinstance(key, re.Pattern):
            self._regex_post_processors.append((key, processor))
        else:
            self._post_processors.setdefault(key, []).append(processor)

    def render(self) -> list[GeneratedFile]:
        """Render every registered template into files, ordered by path."""
        files = []
        for key, template in self.router.templates.items():
            content = template.render()
            for processor in self._post_processors.get(key, ()):
                content = processor(content)
            for pattern, processor in self._regex_post_processors:
                if pattern.search(template.path):
                    content = processor(content)
            files.append(GeneratedFile(
                path=template.output_path,
                content=content,
                executable=template.executable,
                reason=key,
            ))
        return sorted(files, key=lambda f: f.path)

    # ── Reporting ───────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        modules: dict[str, Any] = {}
        for target in sorted(self.targets, key=lambda t: t.value):
            project = self.project(target)
            modules[target.module_name] = {
                "target": target.value,
                "package": project.package_name if project else None,
                "features": self.partition.names(target),
                "dependencies": [str(d) for d in self.dependencies(target)],
                "plugins": [p.key for p in self.build_plugins(target)],
                "build_properties": self.build_properties.properties(target),
                "configuration": (self.configuration(target) or Configuration()).to_dict(),
                "environments": sorted(self.environment_configurations(target)),
            }
        return {
            "project": self.lib_project.name,
            "platform_independent": self.is_platform_independent,
            "targets": sorted(t.value for t in self.targets),
            "module_names": self.module_names(),
            "modules": modules,
            "templates": {
                key: t.output_path for key, t in self.router.templates.items()
            },
        }

    def describe(self) -> str:
        """Multi-line human-readable summary of the run."""
        lines = [
            f"GeneratorContext: {self.lib_project.name}",
            f"   ApplicationType: {self.options.application_type}",
            f"   Language: {self.options.language.value}",
            f"   BuildTool: {self.options.build_tool.value}",
            f"   Module Names: {self.module_names()}",
            "   Templates:",
        ]
        for key, t in self.router.templates.items():
            lines.append(f"      {type(t).__name__}({key} -> {t.output_path})")
        for target in sorted(self.targets, key=lambda t: t.value):
            lines.append(f"   [{target.module_name}]")
            lines.append(f"      Features: {self.partition.names(target)}")
            lines.append(f"      Dependencies: {[str(d) for d in self.dependencies(target)]}")
            lines.append(f"      Plugins: {[p.key for p in self.build_plugins(target)]}")
            config = self.configuration(target)
            if config is not None:
                lines.append(f"      Configuration: {config.to_dict()}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.describe()


class TargetContext:
    """The generator as seen by a feature applied to one target.

    Every accessor reads from and writes to ``target``'s entries; for
    ``SHARED`` those are the base (lib) entries.
    """

    def __init__(self, generator: GeneratorContext, target: Target):
        self.generator = generator
        self.target = target

    @property
    def options(self) -> GenerationOptions:
        return self.generator.options

    @property
    def module_name(self) -> str:
        return self.target.module_name

    @property
    def is_platform_independent(self) -> bool:
        return self.generator.is_platform_independent

    @property
    def generate_example_code(self) -> bool:
        return self.generator.generate_example_code

    @property
    def language(self) -> Language:
        return self.options.language

    @property
    def test_framework(self) -> TestFramework:
        return self.options.test_framework

    # ── Configuration ───────────────────────────────────────────

    @property
    def configuration(self) -> Configuration:
        return self.generator.store.get(self.target, _CONFIG, ApplicationConfiguration)

    @property
    def bootstrap_configuration(self) -> Configuration:
        return self.generator.store.get(self.target, _BOOTSTRAP, BootstrapConfiguration)

    def get_configuration(
        self,
        env: str,
        factory: Callable[[], Configuration] | None = None,
    ) -> Configuration:
        """Environment overlay of the application configuration."""
        return self.generator.store.get_env(
            self.target, _CONFIG, env,
            factory or (lambda: ApplicationConfiguration(env)),
        )

    def has_configuration_environment(self, env: str) -> bool:
        return self.generator.store.has_env(self.target, _CONFIG, env)

    @property
    def dev_configuration(self) -> Configuration:
        return self.get_configuration("dev", ApplicationConfiguration.dev_config)

    @property
    def test_configuration(self) -> Configuration:
        return self.get_configuration("test", ApplicationConfiguration.test_config)

    @property
    def function_test_configuration(self) -> Configuration:
        return self.get_configuration("function", ApplicationConfiguration.function_test_config)

    def get_bootstrap_configuration(
        self,
        env: str,
        factory: Callable[[], Configuration] | None = None,
    ) -> Configuration:
        return self.generator.store.get_env(
            self.target, _BOOTSTRAP, env,
            factory or (lambda: BootstrapConfiguration(env)),
        )

    @property
    def test_bootstrap_configuration(self) -> Configuration:
        return self.get_bootstrap_configuration("test", BootstrapConfiguration.test_config)

    # ── Dependencies, project, features ─────────────────────────

    def add_dependency(self, dependency: Dependency) -> None:
        self.generator.store.get(
            self.target, _DEPENDENCIES, lambda: DependencyList(self.generator.resolver),
        ).add(dependency)

    @property
    def dependencies(self) -> list[Dependency]:
        return self.generator.dependencies(self.target)

    @property
    def project(self) -> ProjectIdentity:
        return self.generator.store.get(
            self.target, _PROJECT,
            lambda: self.generator.lib_project.child(self.module_name),
        )

    @property
    def features(self) -> list[Feature]:
        """Features visible to this module.

        The shared module of an application sees every feature of the run.
        For function applications it only sees the features it applies, so
        target-only features do not leak into the library build.
        """
        if self.target.is_shared and not self.options.is_function:
            return self.generator.all_features
        return self.generator.features(self.target)

    def is_feature_present(self, feature: str | type[Feature]) -> bool:
        for f in self.features:
            if isinstance(feature, str):
                if f.name == feature:
                    return True
            elif isinstance(f, feature):
                return True
        return False

    # ── Build ───────────────────────────────────────────────────

    def add_build_plugin(self, plugin: BuildPlugin) -> BuildPlugin:
        return self.generator.plugins.add(self.target, plugin)

    @property
    def build_plugins(self) -> list[BuildPlugin]:
        return self.generator.build_plugins(self.target)

    @property
    def build_properties(self) -> dict[str, str]:
        return self.generator.build_properties.properties(self.target)

    def put_build_property(self, key: str, value: str) -> None:
        self.generator.build_properties.put_for(self.target, key, value)

    # ── Templates ───────────────────────────────────────────────

    def add_template(self, key: str, template: Template) -> bool:
        return self.generator.add_template(key, template, self.target)

    def remove_template(self, key: str) -> None:
        self.generator.remove_template(key)

    def add_post_processor(self, key: str | re.Pattern[str], processor: PostProcessor) -> None:
        self.generator.add_post_processor(key, processor)

    def source_path(self, path: str) -> str:
        """``/{packagePath}/Foo`` → ``src/main/java/com/example/Foo.java``."""
        path = self.project.substitute(path).lstrip("/")
        return f"{self.language.src_dir}/{path}.{self.language.extension}"

    def test_source_path(self, path: str) -> str:
        path = self.project.substitute(path).lstrip("/")
        return f"{self.language.test_src_dir}/{path}.{self.language.extension}"

    def add_language_template(
        self,
        key: str,
        path: str,
        sources: Mapping[Language, str | Callable[[], str]],
        module: str | None = None,
    ) -> bool:
        """Register the variant for the selected language.

        Without an explicit module the template goes to this target's
        module (lib for ``SHARED``). Missing variants are skipped.
        """
        source = sources.get(self.language)
        if source is None:
            logger.debug("No %s variant for template %s", self.language.value, key)
            return False
        return self.add_template(key, TextTemplate(
            module=module if module is not None else self.module_name,
            path=self.source_path(path),
            content=source,
        ))

    def add_test_template(
        self,
        module: str,
        key: str,
        path: str,
        sources: Mapping[tuple[Language, TestFramework], str | Callable[[], str]],
    ) -> bool:
        """Register the test for the selected language and test framework.

        No matching variant is not an error: the template is skipped.
        """
        source = sources.get((self.language, self.test_framework))
        if source is None:
            logger.debug(
                "No %s/%s variant for test template %s",
                self.language.value, self.test_framework.value, key,
            )
            return False
        return self.add_template(key, TextTemplate(module=module, path=path, content=source))

    def add_test_helper_template(
        self,
        module: str,
        key: str,
        path: str,
        sources: Mapping[Language, str | Callable[[], str]],
    ) -> bool:
        source = sources.get(self.language)
        if source is None:
            return False
        return self.add_template(key, TextTemplate(
            module=module,
            path=self.test_source_path(path),
            content=source,
        ))

    def add_resource_template(self, module: str, key: str, path: str, resource: str) -> bool:
        return self.add_template(key, ResourceTemplate(module=module, path=path, resource=resource))

    # ── Rendering ───────────────────────────────────────────────

    def application_rendering_context(self, language: Language | str) -> ApplicationRenderingContext:
        """Rendering inputs for the application class of this module.

        Raises:
            UnsupportedLanguageError: If ``language`` is not supported.
        """
        try:
            lang = Language(language)
        except ValueError:
            raise UnsupportedLanguageError(f"Unexpected language: {language}") from None
        eager = any(f.has_role(FeatureRole.EAGER_INIT) for f in self.features)
        return ApplicationRenderingContext(
            language=lang,
            default_environment=self.target.environment_name,
            eager_init_singleton=eager,
        )

    def __repr__(self) -> str:
        return f"TargetContext({self.target.value})"
