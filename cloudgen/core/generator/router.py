"""
Template router — decides which module each registered template lands in.

Routing is an ordered table of rules; the first rule whose predicate
matches rewrites the template's module (and possibly its key):

    keep-root             templates declared for the root stay there
    cluster-manifest      reserved cross-cutting keys go to the root
    target-module         in a target scope, foreign modules are rerouted
                          into the target's module, key suffixed
    platform-independent  single-module builds collapse into the root
    default-to-lib        the placeholder default module becomes lib

Templates are de-duplicated by physical identity (``module/path``); the
first registration wins and later ones are dropped without error.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from cloudgen.core.models.target import (
    APP_MODULE,
    DEFAULT_MODULE,
    LIB_MODULE,
    ROOT_MODULE,
    Target,
)
from cloudgen.core.models.template import ConfigTemplate, Template

logger = logging.getLogger(__name__)

# Keys of artifacts that always belong to the aggregate root.
CLUSTER_MANIFEST_KEYS = frozenset({"k8sYaml"})

# (module, key) pairs that only make sense in a real application module.
# The shared module is generated as an application and converted to a
# library, so these are dropped from any scope; target modules declare
# their own copies.
SUPPRESSED_APP_TEMPLATES = frozenset({
    (LIB_MODULE, "application-config"),        # application.properties
    (DEFAULT_MODULE, "application"),           # Application class
    (DEFAULT_MODULE, "applicationTest"),       # Application test
    (DEFAULT_MODULE, "loggingConfig"),         # logback.xml
})


@dataclass(frozen=True)
class Routing:
    """Inputs of one routing decision."""

    key: str
    template: Template
    scope: Target
    platform_independent: bool

    @property
    def module(self) -> str:
        return self.template.module


@dataclass(frozen=True)
class RouteRule:
    """A named (predicate, rewrite) pair.

    ``rewrite`` returns the new ``(key, module)``.
    """

    name: str
    matches: Callable[[Routing], bool]
    rewrite: Callable[[Routing], tuple[str, str]]


def _keep(r: Routing) -> tuple[str, str]:
    return r.key, r.module


def _to_root(r: Routing) -> tuple[str, str]:
    return r.key, ROOT_MODULE


def _to_target(r: Routing) -> tuple[str, str]:
    module = r.scope.module_name
    return f"{r.key}-{module}", module


DEFAULT_RULES: tuple[RouteRule, ...] = (
    RouteRule(
        "keep-root",
        lambda r: r.module == ROOT_MODULE,
        _keep,
    ),
    RouteRule(
        "cluster-manifest",
        lambda r: r.key in CLUSTER_MANIFEST_KEYS,
        _to_root,
    ),
    RouteRule(
        "target-module",
        lambda r: not r.scope.is_shared and r.module != r.scope.module_name,
        _to_target,
    ),
    RouteRule(
        "platform-independent",
        lambda r: r.platform_independent and r.module in (LIB_MODULE, DEFAULT_MODULE, APP_MODULE),
        _to_root,
    ),
    RouteRule(
        "default-to-lib",
        lambda r: r.module == DEFAULT_MODULE,
        lambda r: (r.key, LIB_MODULE),
    ),
)


class TemplateRouter:
    """Registers templates under unique keys and unique physical paths.

    Args:
        platform_independent: Whether the build collapses into one module.
        rules: Routing table; defaults to ``DEFAULT_RULES``.
    """

    def __init__(
        self,
        platform_independent: bool,
        rules: tuple[RouteRule, ...] = DEFAULT_RULES,
    ):
        self.platform_independent = platform_independent
        self.rules = rules
        self._templates: dict[str, Template] = {}
        self._paths: set[str] = set()

    # ── Routing ─────────────────────────────────────────────────

    def route(self, key: str, template: Template, scope: Target) -> tuple[str, Template]:
        """Apply the first matching rule; return the final key and template."""
        routing = Routing(key, template, scope, self.platform_independent)
        for rule in self.rules:
            if rule.matches(routing):
                new_key, module = rule.rewrite(routing)
                if module != template.module:
                    logger.debug(
                        "Rule %s: %s moved from '%s' to '%s'",
                        rule.name, key, template.module, module,
                    )
                    template = template.with_module(module)
                return new_key, template
        return key, template

    def is_suppressed(self, key: str, template: Template) -> bool:
        """Whether the template only belongs in a real application module."""
        if self.platform_independent:
            return False
        if (template.module, key) not in SUPPRESSED_APP_TEMPLATES:
            return False
        # application-config is only suppressed as a configuration file
        if key == "application-config":
            return isinstance(template, ConfigTemplate)
        return True

    # ── Registration ────────────────────────────────────────────

    def register(self, key: str, template: Template, scope: Target = Target.SHARED) -> bool:
        """Suppress, route and register a template.

        Returns:
            True if the template was stored.
        """
        if self.is_suppressed(key, template):
            logger.debug("Suppressed app-only template %s in '%s'", key, template.module)
            return False

        key, template = self.route(key, template, scope)
        return self.add(key, template)

    def add(self, key: str, template: Template) -> bool:
        """Store a template as-is, unless its physical path is taken.

        Re-registering an existing key replaces the old entry only when
        the new path is free.
        """
        path = template.physical_path
        if path in self._paths:
            logger.debug("Skipping %s: %s already registered", key, path)
            return False

        previous = self._templates.get(key)
        if previous is not None:
            self._paths.discard(previous.physical_path)
            logger.debug("Replacing template %s", key)

        self._paths.add(path)
        self._templates[key] = template
        return True

    def unregister(self, key: str) -> Template | None:
        """Remove a template and free its physical path."""
        template = self._templates.pop(key, None)
        if template is not None:
            self._paths.discard(template.physical_path)
        return template

    # ── Lookup ──────────────────────────────────────────────────

    @property
    def templates(self) -> dict[str, Template]:
        """Registered templates, ordered by key."""
        return {key: self._templates[key] for key in sorted(self._templates)}

    def get(self, key: str) -> Template | None:
        return self._templates.get(key)

    def is_registered(self, module: str, path: str) -> bool:
        return f"{module}/{path}" in self._paths

    def by_path(self) -> dict[tuple[str, str], Template]:
        return {
            (t.module, t.path): t
            for t in sorted(self._templates.values(), key=lambda t: (t.module, t.path))
        }

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, key: object) -> bool:
        return key in self._templates
