"""
Template models — what features register, and what rendering produces.

A ``Template`` is a placement (module + path) plus a content source.
The router only ever changes the placement; content is produced by
``render()`` once every template has been registered.
"""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel

from cloudgen.core.models.configuration import Configuration
from cloudgen.core.models.target import ROOT_MODULE


class GeneratedFile(BaseModel):
    """A file produced by rendering a registered template.

    Attributes:
        path:       Relative path from the generated project root.
        content:    Full file content.
        executable: Whether the file should be marked executable.
        reason:     Template key that produced the file.
    """

    path: str
    content: str
    executable: bool = False
    reason: str = ""


@dataclass(frozen=True)
class Template(ABC):
    """Placement of one generated file.

    Subclasses supply the content through ``render()``.
    """

    module: str
    path: str
    executable: bool = False

    @property
    def physical_path(self) -> str:
        """Physical identity used to de-duplicate templates."""
        return f"{self.module}/{self.path}"

    @property
    def output_path(self) -> str:
        """Path of the rendered file relative to the project root."""
        if self.module == ROOT_MODULE:
            return self.path
        return f"{self.module}/{self.path}"

    def with_module(self, module: str) -> Template:
        return dataclasses.replace(self, module=module)

    @abstractmethod
    def render(self) -> str:
        """Produce the file content."""


@dataclass(frozen=True)
class TextTemplate(Template):
    """Literal text, or a zero-argument callable producing it."""

    content: str | Callable[[], str] = ""

    def render(self) -> str:
        if callable(self.content):
            return self.content()
        return self.content


@dataclass(frozen=True)
class ConfigTemplate(Template):
    """A configuration tree written as properties or YAML."""

    config: Configuration | None = None
    format: str = "properties"

    def render(self) -> str:
        if self.config is None:
            return ""
        if self.format == "yaml":
            return self.config.to_yaml()
        return self.config.to_properties()


@dataclass(frozen=True)
class ResourceTemplate(Template):
    """A file copied verbatim from a resource directory."""

    resource: str = ""
    base_dir: Path | None = None

    def render(self) -> str:
        base = self.base_dir or Path(__file__).resolve().parents[2] / "resources"
        return (base / self.resource).read_text(encoding="utf-8")
