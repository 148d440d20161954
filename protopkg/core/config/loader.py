"""
Configuration loader — reads protopkg.yml into a BuildConfig.

Reads YAML, validates against the pydantic model, anchors relative
paths at the config file's directory, and layers CLI overrides on top.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from protopkg.core.models.build import BuildConfig

logger = logging.getLogger(__name__)

# Default config filename
BUILD_CONFIG_FILE = "protopkg.yml"


class ConfigError(Exception):
    """Raised when build configuration is invalid or missing."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for protopkg.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to protopkg.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / BUILD_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def _validate(data: dict[str, Any], base_dir: Path, origin: str) -> BuildConfig:
    data = {**data, "base_dir": str(base_dir)}
    try:
        return BuildConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid build configuration in {origin}: {e}") from e


def _clean(overrides: dict[str, Any] | None) -> dict[str, Any]:
    """Drop unset (None) overrides so they don't mask file values."""
    return {k: v for k, v in (overrides or {}).items() if v is not None}


def load_config(
    path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> BuildConfig:
    """Load and validate build configuration.

    Args:
        path: Explicit path to protopkg.yml. If None, searches upward.
        overrides: Field values that replace those from the file
            (None values are ignored).

    Returns:
        Validated BuildConfig.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        raise ConfigError(
            f"No {BUILD_CONFIG_FILE} found. "
            "Create one, specify --config, or pass --output."
        )

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading build config from %s", path)

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

    # The YAML may wrap everything under a "build" key or be flat
    build_data = data["build"] if isinstance(data.get("build"), dict) else data
    build_data = {**build_data, **_clean(overrides)}

    config = _validate(build_data, path.parent.resolve(), str(path))
    logger.info("Loaded build config from %s (output=%s)", path, config.output_dir)
    return config


def config_from_overrides(
    overrides: dict[str, Any],
    base_dir: Path | None = None,
) -> BuildConfig:
    """Build a config from CLI flags alone, without a config file.

    Raises:
        ConfigError: If the flags don't form a valid config.
    """
    base = (base_dir or Path.cwd()).resolve()
    return _validate(_clean(overrides), base, "command-line options")


def resolve_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> BuildConfig:
    """Config file if there is one, otherwise CLI flags alone.

    An explicit ``config_path`` must load. Without one, a discovered
    protopkg.yml is used; if none is found, the overrides must be
    complete enough on their own (i.e. include ``output_dir``).
    """
    if config_path is not None:
        return load_config(config_path, overrides)

    found = find_config_file()
    if found is not None:
        return load_config(found, overrides)

    if overrides and overrides.get("output_dir"):
        return config_from_overrides(overrides)

    raise ConfigError(
        f"No {BUILD_CONFIG_FILE} found. "
        "Create one, specify --config, or pass --output."
    )
