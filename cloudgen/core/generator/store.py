"""
Scoped store — per-target keyed storage.

One store holds every per-module entry of a generation run: the
configuration trees, environment overlays, dependency lists, project
identities. Entries are created on first access through a factory and
cached, so repeated lookups return the same instance. Nothing is
removed until the run is torn down.

The ``SHARED`` entries are created up front by the generator context
and act as the base store every other target falls back from.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from cloudgen.core.models.target import Target

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScopedStore:
    """Create-once storage keyed by ``(target, key)`` or ``(target, key, env)``."""

    def __init__(self) -> None:
        self._entries: dict[tuple[Target, str], Any] = {}
        self._env_entries: dict[tuple[Target, str], dict[str, Any]] = {}

    # ── Plain entries ───────────────────────────────────────────

    def get(self, target: Target, key: str, factory: Callable[[], T]) -> T:
        """Return the entry for ``(target, key)``, creating it if absent."""
        slot = (target, key)
        if slot not in self._entries:
            self._entries[slot] = factory()
            logger.debug("Opened %s store for %s", key, target.value)
        return self._entries[slot]

    def peek(self, target: Target, key: str) -> Any | None:
        """Return the entry if it exists, without creating it."""
        return self._entries.get((target, key))

    def has(self, target: Target, key: str) -> bool:
        return (target, key) in self._entries

    def targets(self, key: str) -> list[Target]:
        """Targets that have an entry for ``key``, sorted by identifier."""
        return sorted(
            (t for (t, k) in self._entries if k == key),
            key=lambda t: t.value,
        )

    # ── Per-environment entries ─────────────────────────────────

    def get_env(self, target: Target, key: str, env: str, factory: Callable[[], T]) -> T:
        """Return the ``env`` entry for ``(target, key)``, creating it if absent."""
        envs = self._env_entries.setdefault((target, key), {})
        if env not in envs:
            envs[env] = factory()
            logger.debug("Opened %s[%s] store for %s", key, env, target.value)
        return envs[env]

    def has_env(self, target: Target, key: str, env: str) -> bool:
        return env in self._env_entries.get((target, key), {})

    def environments(self, target: Target, key: str) -> dict[str, Any]:
        """Environment entries for ``(target, key)``, in creation order."""
        return dict(self._env_entries.get((target, key), {}))

    def env_targets(self, key: str) -> list[Target]:
        return sorted(
            (t for (t, k), envs in self._env_entries.items() if k == key and envs),
            key=lambda t: t.value,
        )

    # ── Teardown ────────────────────────────────────────────────

    def clear(self) -> None:
        self._entries.clear()
        self._env_entries.clear()
