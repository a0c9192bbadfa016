"""Group Browser - Configuration Module.

This module provides YAML-backed configuration with pydantic validation.
"""

from .config_manager import AppConfig, ConfigError, ConfigManager

__all__ = ["AppConfig", "ConfigManager", "ConfigError"]
