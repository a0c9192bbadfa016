"""Configuration management for Group Browser.

This module loads and saves the application configuration as YAML.
Configuration is stored in the ~/.groupbrowser/ directory.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration operations fail."""

    pass


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = Field(default="~/.groupbrowser/groupbrowser.db")


class CacheConfig(BaseModel):
    """Query cache configuration. A TTL of 0 disables caching."""

    ttl_seconds: float = Field(default=120.0, ge=0)
    max_entries: int = Field(default=1024, ge=1)


class QueryConfig(BaseModel):
    """Pagination limits and deadlines for group queries."""

    default_page_size: int = Field(default=24, ge=1)
    max_page_size: int = Field(default=500, ge=1)
    default_member_limit: int = Field(default=60, ge=1)
    timeout_seconds: Optional[float] = Field(default=None, gt=0)


class StatusConfig(BaseModel):
    """Lifecycle status thresholds."""

    new_window_days: int = Field(default=7, ge=0)
    inactive_cycles: int = Field(default=3, ge=1)


class LinksConfig(BaseModel):
    """Outbound link and media URL templates."""

    deep_link_template: str = "https://www.facebook.com/ads/library/?id={external_id}"
    media_base_url: Optional[str] = None


class AppConfig(BaseModel):
    """Application configuration."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    status: StatusConfig = Field(default_factory=StatusConfig)
    links: LinksConfig = Field(default_factory=LinksConfig)
    log_level: str = "INFO"
    api_host: str = "0.0.0.0"
    api_port: int = 8000


class ConfigManager:
    """Manages YAML configuration storage.

    Attributes:
        config_dir: Path to the configuration directory.
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".groupbrowser"
    CONFIG_FILE = "config.yaml"

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        """Initialize the configuration manager.

        Args:
            config_dir: Custom configuration directory path.
        """
        self.config_dir = Path(config_dir) if config_dir else self.DEFAULT_CONFIG_DIR
        self._config: Optional[AppConfig] = None

    @property
    def config_path(self) -> Path:
        """Path to the configuration file."""
        return self.config_dir / self.CONFIG_FILE

    def save(self, config: AppConfig) -> None:
        """Save configuration to disk.

        Raises:
            ConfigError: If save operation fails.
        """
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(config.model_dump(), f, sort_keys=False)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to save configuration: {e}") from e

        self._config = config
        logger.info(f"Configuration saved to {self.config_path}")

    def load(self) -> AppConfig:
        """Load configuration from disk.

        Returns:
            The loaded AppConfig.

        Raises:
            ConfigError: If configuration doesn't exist or can't be parsed.
        """
        if not self.config_path.exists():
            raise ConfigError(f"Configuration not found at {self.config_path}")

        try:
            with open(self.config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Invalid configuration format: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration at {self.config_path} must be a mapping")

        try:
            self._config = AppConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration values: {e}") from e
        return self._config

    def get_config(self) -> AppConfig:
        """Get the current configuration, falling back to defaults.

        A missing file yields the defaults; a broken one still raises.
        """
        if self._config is None:
            if self.is_configured():
                self._config = self.load()
            else:
                logger.info(f"No configuration at {self.config_path}, using defaults")
                self._config = AppConfig()
        return self._config

    def update(self, **kwargs: Any) -> AppConfig:
        """Update top-level configuration sections and save.

        Args:
            **kwargs: Configuration fields to update.

        Returns:
            The updated AppConfig.
        """
        config_dict = self.get_config().model_dump()

        for key, value in kwargs.items():
            if key in config_dict:
                config_dict[key] = value

        try:
            new_config = AppConfig(**config_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration values: {e}") from e
        self.save(new_config)
        return new_config

    def is_configured(self) -> bool:
        """Check if a configuration file exists."""
        return self.config_path.exists()

    def reset(self) -> None:
        """Delete the configuration file."""
        if self.config_path.exists():
            self.config_path.unlink()
        self._config = None
        logger.info("Configuration reset complete")
