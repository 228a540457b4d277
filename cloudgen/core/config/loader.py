"""
Configuration loader — reads cloudgen.yml into a build request.

This is the primary entry point for loading a generation request.
It reads YAML, validates against Pydantic schemas, and returns
typed domain objects.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from cloudgen.core.config.options import BuildRequest

logger = logging.getLogger(__name__)

# Default request filename
REQUEST_FILE = "cloudgen.yml"


class ConfigError(Exception):
    """Raised when the build request is invalid or missing."""


def find_request_file(start_dir: Path | None = None) -> Path | None:
    """Search for cloudgen.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to cloudgen.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / REQUEST_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_request(path: Path | None = None) -> BuildRequest:
    """Load and validate a build request.

    Args:
        path: Explicit path to cloudgen.yml. If None, searches upward.

    Returns:
        Validated BuildRequest model.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_request_file()

    if path is None:
        raise ConfigError(
            f"No {REQUEST_FILE} found. "
            "Create one, or specify --config."
        )

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading build request from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # Options may sit at the top level next to "project"
    request_data = dict(data)
    options = dict(request_data.pop("options", None) or {})
    for key in list(request_data):
        if key not in BuildRequest.model_fields:
            options.setdefault(key, request_data.pop(key))
    request_data["options"] = options

    try:
        request = BuildRequest.model_validate(request_data)
    except Exception as e:
        raise ConfigError(f"Invalid build request: {e}") from e

    logger.info(
        "Loaded build request '%s' with %d features",
        request.project, len(request.features),
    )
    return request
