"""
Generation errors — fatal conditions that abort a generation run.

Path collisions between templates and duplicate registrations are not
errors; they are resolved silently by the template router.
"""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for run-aborting generation failures."""


class SelectionError(GenerationError):
    """Raised when the requested feature selection cannot be resolved."""


class CoordinateNotFoundError(GenerationError):
    """Raised by a coordinate resolver when an artifact is unknown."""

    def __init__(self, artifact_id: str):
        super().__init__(f"No coordinate found for artifact '{artifact_id}'")
        self.artifact_id = artifact_id


class UnknownPluginCoordinateError(GenerationError):
    """Raised when a versioned build plugin has no published coordinate."""

    def __init__(self, key: str):
        super().__init__(
            f"Unexpected build plugin or version mismatch for '{key}'"
        )
        self.key = key


class UnsupportedLanguageError(GenerationError):
    """Raised when a rendering context is requested for an unknown language."""
