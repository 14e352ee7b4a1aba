"""
Configuration loader — reads config.yml into the Settings model.

Resolution order for the file:
    --config PATH  >  $QUICKALIAS_CONFIG  >  ~/.config/quick-alias/config.yml

A missing file is not an error (defaults apply).  An unreadable file,
invalid YAML, or unknown / mistyped keys raise ConfigError.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from quickalias.core.models.settings import Settings

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "QUICKALIAS_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/quick-alias/config.yml")


class ConfigError(Exception):
    """Raised when the settings file is invalid or unreadable."""


def find_config_file(explicit: Path | None = None) -> Path:
    """Return the config path that applies (it may not exist)."""
    if explicit is not None:
        return explicit.expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit config path. If None, uses env var / default path.

    Returns:
        Validated Settings (all defaults when no file exists).

    Raises:
        ConfigError: If the file exists but cannot be used.
    """
    config_path = find_config_file(path)

    if not config_path.exists():
        if path is not None:
            raise ConfigError(f"Config file not found: {config_path}")
        logger.debug("No config file at %s — using defaults", config_path)
        return Settings()

    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {config_path}, got {type(data).__name__}")

    # Accept both flat keys and a top-level "quick-alias:" section
    section = data.get("quick-alias", data)

    try:
        settings = Settings.model_validate(section)
    except Exception as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

    logger.info("Loaded settings from %s", config_path)
    return settings
