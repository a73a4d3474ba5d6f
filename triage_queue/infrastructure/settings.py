"""Application Settings and Configuration.

This module provides application-wide settings that combine configuration
from the configuration manager with application-specific defaults.
"""

import os
from pathlib import Path
from typing import Optional

from triage_queue.infrastructure.config_manager import ConfigManager, QueueConfig

# Application metadata
APP_NAME = "Triage-Queue"
APP_VERSION = "1.0.0"


class Settings:
    """Application settings loaded from the configuration manager and environment.

    The queue configuration is loaded on first access; a bad environment
    surfaces as a pydantic ValidationError at that point.
    """

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize settings.

        Parameters:
            config_manager: Source of configuration (environment if None)
        """
        self._config_manager = config_manager
        self._queue_config: Optional[QueueConfig] = None

        self.app_name = os.getenv("TQ_APP_NAME", APP_NAME)
        self.app_version = APP_VERSION

    @property
    def config_manager(self) -> ConfigManager:
        """Get configuration manager instance."""
        if self._config_manager is None:
            self._config_manager = ConfigManager.from_environment()
        return self._config_manager

    @property
    def queue_config(self) -> QueueConfig:
        """Get the validated queue configuration."""
        if self._queue_config is None:
            self._queue_config = self.config_manager.get_queue_config()
        return self._queue_config

    @property
    def data_file(self) -> Path:
        return Path(self.queue_config.data_file)

    @property
    def initial_capacity(self) -> int:
        return self.queue_config.initial_capacity

    @property
    def log_level(self) -> str:
        return self.queue_config.log_level

    @property
    def log_format(self) -> str:
        return self.queue_config.log_format

    def reload(self) -> None:
        """Drop cached configuration so the next access re-reads the environment."""
        self._config_manager = None
        self._queue_config = None


# Global settings instance
settings = Settings()
