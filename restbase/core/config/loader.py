"""
Configuration loader — merges restbase.yml layers into a ScaffoldConfig.

Sources, later wins (mappings are merged key by key, lists replace):

    built-in defaults → ~/.restbase.yml → ./restbase.yml → --config PATH

Every layer is optional except an explicit ``--config``, which must exist.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from restbase.core.errors import ConfigError
from restbase.core.models.config import ScaffoldConfig

logger = logging.getLogger(__name__)

CONFIG_FILE = "restbase.yml"
USER_CONFIG_FILE = ".restbase.yml"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict with ``override`` merged into ``base``.

    Nested mappings are merged recursively; any other value in
    ``override`` replaces the one in ``base``.
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def read_config_file(path: Path) -> dict[str, Any]:
    """Read one YAML layer.

    Raises:
        ConfigError: Unreadable file, bad YAML, or not a mapping.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def config_sources(
    explicit: Path | None = None,
    cwd: Path | None = None,
    home: Path | None = None,
) -> list[Path]:
    """The config files that apply, lowest precedence first."""
    home = home if home is not None else Path.home()
    cwd = cwd if cwd is not None else Path.cwd()

    sources = [p for p in (home / USER_CONFIG_FILE, cwd / CONFIG_FILE) if p.is_file()]
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigError(f"Config file not found: {explicit}")
        sources.append(explicit)
    return sources


def load_config(
    explicit: Path | None = None,
    cwd: Path | None = None,
    home: Path | None = None,
) -> ScaffoldConfig:
    """Load and validate the effective configuration.

    Raises:
        ConfigError: If any layer is unreadable or the merged result is
            invalid.
    """
    data = ScaffoldConfig().model_dump()
    sources = config_sources(explicit, cwd=cwd, home=home)
    for path in sources:
        logger.debug("Merging config layer %s", path)
        data = deep_merge(data, read_config_file(path))

    try:
        config = ScaffoldConfig.model_validate(data)
    except PydanticValidationError as e:
        origin = ", ".join(str(p) for p in sources) or "defaults"
        raise ConfigError(f"Invalid configuration ({origin}): {e}") from e

    logger.info("Configuration loaded from %s", [str(p) for p in sources] or "defaults")
    return config
