"""
Target model — the deployment environments a build can fan out to.

Every concrete target gets its own output module. The ``SHARED``
sentinel stands for the library module that holds everything common
to all targets.
"""

from __future__ import annotations

from enum import Enum

# ── Module names ────────────────────────────────────────────────

ROOT_MODULE = ""             # the root/aggregate project
DEFAULT_MODULE = "default"   # placeholder, resolved to lib or a target module
LIB_MODULE = "lib"
APP_MODULE = "app"


_MODULE_NAMES = {
    "SHARED": LIB_MODULE,
    "AWS": "aws",
    "AZURE": "azure",
    "GCP": "gcp",
    "OCI": "oci",
}

_ENVIRONMENT_NAMES = {
    "SHARED": None,
    "AWS": "ec2",
    "AZURE": "azure",
    "GCP": "gcp",
    "OCI": "oraclecloud",
}

_TITLES = {
    "SHARED": "Shared",
    "AWS": "Amazon Web Services",
    "AZURE": "Microsoft Azure",
    "GCP": "Google Cloud Platform",
    "OCI": "Oracle Cloud Infrastructure",
}


class Target(str, Enum):
    """A deployment target, or ``SHARED`` for the library module."""

    SHARED = "SHARED"
    AWS = "AWS"
    AZURE = "AZURE"
    GCP = "GCP"
    OCI = "OCI"

    @property
    def module_name(self) -> str:
        """Name of the output module generated for this target."""
        return _MODULE_NAMES[self.value]

    @property
    def environment_name(self) -> str | None:
        """Runtime environment activated by default in the target module."""
        return _ENVIRONMENT_NAMES[self.value]

    @property
    def title(self) -> str:
        return _TITLES[self.value]

    @property
    def is_shared(self) -> bool:
        return self is Target.SHARED

    @classmethod
    def concrete(cls) -> list[Target]:
        """All real deployment targets, sorted by identifier."""
        return sorted((t for t in cls if t is not cls.SHARED), key=lambda t: t.value)

    @classmethod
    def parse(cls, value: str | Target) -> Target:
        """Look up a target by identifier or module name (case-insensitive)."""
        if isinstance(value, Target):
            return value
        text = str(value).strip()
        for target in cls:
            if text.upper() == target.value or text.lower() == target.module_name:
                return target
        raise ValueError(f"Unknown target: {value!r}")

    def __str__(self) -> str:
        return self.value
