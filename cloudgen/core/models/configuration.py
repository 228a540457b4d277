"""
Configuration model — nested settings trees written into each module.

A configuration is a nested string-keyed mapping of scalars and lists.
Features add settings with dotted keys::

    config.add_nested("micronaut.metrics.enabled", True)

which produces ``{"micronaut": {"metrics": {"enabled": True}}}``.

Every tree serializes to a flat properties file (dotted keys, ``[i]``
list indices, lines sorted) or to a key-sorted YAML document. Both are
byte-identical across runs for the same tree.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import yaml

MAIN_RESOURCES = "src/main/resources"
TEST_RESOURCES = "src/test/resources"


class Configuration:
    """A nested settings tree with a file identity.

    Args:
        key:          Template key used when the tree is registered.
        file_name:    Base file name without extension (``application-dev``).
        location:     Resource directory inside the module.
        environment:  Environment name for overlays, ``None`` for the default.
    """

    def __init__(
        self,
        key: str = "application-config",
        file_name: str = "application",
        location: str = MAIN_RESOURCES,
        environment: str | None = None,
    ):
        self.key = key
        self.file_name = file_name
        self.location = location
        self.environment = environment
        self._data: dict[str, Any] = {}

    # ── Mutation ────────────────────────────────────────────────

    def add_nested(self, path: str | Mapping[str, Any], value: Any = None) -> None:
        """Add one dotted-key setting, or every entry of a mapping."""
        if isinstance(path, Mapping):
            for key in sorted(path):
                self.add_nested(key, path[key])
            return

        parts = path.split(".")
        node = self._data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value

    def put(self, key: str, value: Any) -> None:
        """Set a top-level key verbatim (no dot splitting)."""
        self._data[key] = value

    def remove(self, path: str) -> None:
        parts = path.split(".")
        node = self._data
        for part in parts[:-1]:
            node = node.get(part)
            if not isinstance(node, dict):
                return
        node.pop(parts[-1], None)

    # ── Lookup ──────────────────────────────────────────────────

    def get(self, path: str, default: Any = None) -> Any:
        node: Any = self._data
        for part in path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def contains(self, path: str) -> bool:
        marker = object()
        return self.get(path, marker) is not marker

    def to_dict(self) -> dict[str, Any]:
        return _copy_tree(self._data)

    def is_empty(self) -> bool:
        return not self._data

    def file_path(self, extension: str = "properties") -> str:
        return f"{self.location}/{self.file_name}.{extension}"

    # ── Serialization ───────────────────────────────────────────

    def to_properties(self) -> str:
        return to_properties(self._data)

    def to_yaml(self) -> str:
        return to_yaml(self._data)

    def __len__(self) -> int:
        return len(flatten(self._data))

    def __repr__(self) -> str:
        env = f", env={self.environment!r}" if self.environment else ""
        return f"{type(self).__name__}({self.file_name!r}{env}, {self._data!r})"


class ApplicationConfiguration(Configuration):
    """``application[-env]`` settings."""

    def __init__(self, environment: str | None = None, location: str = MAIN_RESOURCES):
        if environment:
            super().__init__(
                key=f"application-config-{environment}",
                file_name=f"application-{environment}",
                location=location,
                environment=environment,
            )
        else:
            super().__init__()

    @classmethod
    def dev_config(cls) -> ApplicationConfiguration:
        return cls("dev")

    @classmethod
    def test_config(cls) -> ApplicationConfiguration:
        return cls("test", location=TEST_RESOURCES)

    @classmethod
    def function_test_config(cls) -> ApplicationConfiguration:
        return cls("function", location=TEST_RESOURCES)


class BootstrapConfiguration(Configuration):
    """``bootstrap[-env]`` settings, read before the application context."""

    def __init__(self, environment: str | None = None, location: str = MAIN_RESOURCES):
        if environment:
            super().__init__(
                key=f"bootstrap-config-{environment}",
                file_name=f"bootstrap-{environment}",
                location=location,
                environment=environment,
            )
        else:
            super().__init__(key="bootstrap-config", file_name="bootstrap")

    @classmethod
    def test_config(cls) -> BootstrapConfiguration:
        return cls("test", location=TEST_RESOURCES)


# ═══════════════════════════════════════════════════════════════════
#  Serialization helpers
# ═══════════════════════════════════════════════════════════════════


def flatten(tree: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    """Flatten a nested tree into dotted keys with ``[i]`` list indices."""
    flat: dict[str, str] = {}
    for key, value in tree.items():
        _flatten_value(flat, f"{prefix}{key}", value)
    return flat


def _flatten_value(flat: dict[str, str], path: str, value: Any) -> None:
    if isinstance(value, Mapping):
        flat.update(flatten(value, path + "."))
    elif isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _flatten_value(flat, f"{path}[{i}]", item)
    else:
        flat[path] = _text(value)


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def to_properties(tree: Mapping[str, Any]) -> str:
    """Serialize a tree as sorted ``key=value`` lines.

    Keys and values are escaped the way ``java.util.Properties`` writes
    them, so the output is a valid properties file. Every line, the last
    one included, ends with a newline; an empty tree gives an empty string.
    """
    lines = sorted(
        f"{_escape(key, is_key=True)}={_escape(value, is_key=False)}"
        for key, value in flatten(tree).items()
    )
    return "\n".join(lines) + "\n" if lines else ""


def to_yaml(tree: Mapping[str, Any]) -> str:
    if not tree:
        return ""
    return yaml.safe_dump(
        _copy_tree(tree),
        default_flow_style=False,
        sort_keys=True,
        allow_unicode=True,
    )


_SPECIAL = {"\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f"}


def _escape(text: str, is_key: bool) -> str:
    out: list[str] = []
    for i, ch in enumerate(text):
        if ch == "\\":
            out.append("\\\\")
        elif ch in _SPECIAL:
            out.append(_SPECIAL[ch])
        elif ch == " ":
            out.append("\\ " if is_key or i == 0 else " ")
        elif ch in "=:#!":
            out.append("\\" + ch)
        elif ord(ch) < 0x20 or ord(ch) > 0x7E:
            out.append(f"\\u{ord(ch):04X}")
        else:
            out.append(ch)
    return "".join(out)


def _copy_tree(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _copy_tree(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_copy_tree(v) for v in value]
    return value
