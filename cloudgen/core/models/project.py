"""
Project identity — the name and package of a generated module.

The shared module keeps the identity the user asked for; every target
module derives its own by appending the module name to the package
(``com.example.demo`` → ``com.example.demo.aws``).
"""

from __future__ import annotations

import re

from pydantic import BaseModel, field_validator

_PACKAGE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_-]*)*$")


class ProjectIdentity(BaseModel):
    """Name and package of one module of the generated project."""

    package_name: str
    name: str

    @field_validator("package_name")
    @classmethod
    def _check_package(cls, value: str) -> str:
        if not _PACKAGE_RE.match(value):
            raise ValueError(f"Invalid package name: {value!r}")
        return value

    @classmethod
    def parse(cls, qualified: str) -> ProjectIdentity:
        """Parse ``com.example.demo`` into package ``com.example.demo`` + name ``demo``.

        A bare name becomes its own package.
        """
        qualified = qualified.strip()
        if "." in qualified:
            package, _, name = qualified.rpartition(".")
            return cls(package_name=f"{package}.{_java_identifier(name)}", name=name)
        return cls(package_name=_java_identifier(qualified), name=qualified)

    def child(self, module_name: str) -> ProjectIdentity:
        """Identity of a module nested under this one."""
        return ProjectIdentity.parse(f"{self.package_name}.{module_name}")

    @property
    def package_path(self) -> str:
        return self.package_name.replace(".", "/")

    @property
    def class_name(self) -> str:
        """``my-app`` → ``MyApp``."""
        return "".join(part.capitalize() for part in re.split(r"[-_\s]+", self.name) if part)

    @property
    def property_name(self) -> str:
        cls_name = self.class_name
        return cls_name[:1].lower() + cls_name[1:]

    @property
    def natural_name(self) -> str:
        """``my-app`` → ``My App``."""
        return " ".join(part.capitalize() for part in re.split(r"[-_\s]+", self.name) if part)

    def properties(self) -> dict[str, str]:
        return {
            "name": self.name,
            "packageName": self.package_name,
            "packagePath": self.package_path,
            "className": self.class_name,
            "propertyName": self.property_name,
            "naturalName": self.natural_name,
        }

    def substitute(self, text: str) -> str:
        """Replace ``{packagePath}``-style placeholders in a path."""
        for key, value in self.properties().items():
            text = text.replace("{" + key + "}", value)
        return text


def _java_identifier(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9_]", "", name.replace("-", "_")).lower() or "app"
