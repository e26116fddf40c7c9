"""
Configuration management and singleton pattern.

This module provides the main configuration loading and management interface,
implementing a singleton pattern to ensure configuration is loaded only once.
"""

import logging
from pathlib import Path
from typing import Optional

from ..models.config import AppConfig, MonitorConfig
from .loader import load_main_config
from .validators import validate_monitor_config

logger = logging.getLogger(__name__)

# --- Global Singleton for Configuration ---

_CONFIG: Optional[AppConfig] = None

# Default path of the configuration file, relative to this source file.
# Can be overridden with set_config_path() or the CLI's --config option.
DEFAULT_CONFIG_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"
_CONFIG_FILE_PATH = DEFAULT_CONFIG_FILE_PATH


def set_config_path(config_path: Path) -> None:
    """
    Set a custom configuration file path and drop any cached configuration.

    Unlike the default path, a custom path must exist when the configuration
    is loaded.
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG = None
    logger.info(f"Configuration path set to: {config_path}")


def clear_config_cache() -> None:
    """Clear the cached configuration, forcing a reload on next access."""
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def is_config_loaded() -> bool:
    """Check whether a configuration is currently cached."""
    return _CONFIG is not None


def _load_config(config_path: Path) -> AppConfig:
    """
    Load and validate the application configuration.

    The default configuration file is optional: when it is missing the
    built-in defaults are used. Any other path must exist.

    Raises:
        FileNotFoundError: If a custom configuration file is missing
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If the TOML file is malformed
    """
    if config_path == DEFAULT_CONFIG_FILE_PATH and not config_path.exists():
        logger.info(f"No configuration file at {config_path}, using defaults")
        return AppConfig(monitor=MonitorConfig())

    config_data = load_main_config(config_path)

    app_config = AppConfig(monitor=validate_monitor_config(config_data))
    logger.info(f"Successfully loaded configuration from {config_path}")
    return app_config


def get_config() -> AppConfig:
    """
    Return the application configuration, loading it on first access.

    Returns:
        The cached AppConfig instance
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _load_config(_CONFIG_FILE_PATH)
    return _CONFIG
