"""Configuration Manager for the triage queue.

This module loads and validates queue configuration (data file location,
starting capacity, logging) from environment variables or a JSON file.

Architecture:
    - Infrastructure layer isolated from domain
    - Type-safe configuration using Pydantic models
    - Fail-fast validation prevents runtime errors
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from triage_queue.domain.store import DEFAULT_INITIAL_CAPACITY, MIN_INITIAL_CAPACITY

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = "patients.txt"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


class QueueConfig(BaseModel):
    """Queue configuration model.

    Parameters:
        data_file: File used by save/load
        initial_capacity: Starting capacity of the store (at least 8)
        log_level: Logging level name
        log_format: "text" (Rich console) or "json"
    """

    data_file: str = Field(DEFAULT_DATA_FILE, description="Path of the queue data file")
    initial_capacity: int = Field(
        DEFAULT_INITIAL_CAPACITY,
        ge=MIN_INITIAL_CAPACITY,
        description="Starting store capacity"
    )
    log_level: str = Field("WARNING", description="Logging level")
    log_format: str = Field("text", description="Log output format")

    @field_validator("data_file")
    @classmethod
    def validate_data_file(cls, v: str) -> str:
        """Validate the data file's directory exists (the file itself may not yet)."""
        if not v or not v.strip():
            raise ValueError("Data file path cannot be empty")
        path = Path(v)
        if not path.parent.exists():
            raise ValueError(f"Data file directory does not exist: {path.parent}")
        return str(path)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v.upper() not in LOG_LEVELS:
            raise ValueError(f"Unsupported log level: {v}. Supported: {list(LOG_LEVELS)}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in LOG_FORMATS:
            raise ValueError(f"Unsupported log format: {v}. Supported: {list(LOG_FORMATS)}")
        return v.lower()


class ConfigManager:
    """Configuration manager for queue settings.

    Example Usage:
        ```python
        # Load from environment variables
        config = ConfigManager.from_environment()
        queue_config = config.get_queue_config()

        # Load from file
        config = ConfigManager.from_file("config.json")
        queue_config = config.get_queue_config()
        ```
    """

    def __init__(self, config_data: Dict[str, Any]):
        """Initialize configuration manager.

        Parameters:
            config_data: Configuration dictionary
        """
        self._config_data = config_data
        self._queue_config: Optional[QueueConfig] = None

    @classmethod
    def from_environment(cls) -> 'ConfigManager':
        """Load configuration from environment variables.

        Environment Variables:
            - TQ_DATA_FILE: Path of the queue data file
            - TQ_INITIAL_CAPACITY: Starting store capacity
            - TQ_LOG_LEVEL: Logging level
            - TQ_LOG_FORMAT: "text" or "json"

        A ``.env`` file in the working directory is loaded first if present;
        real environment variables take precedence over it.

        Returns:
            ConfigManager instance
        """
        env_path = Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            logger.debug(f"Loaded environment variables from {env_path}")

        queue_data: Dict[str, Any] = {}
        if os.getenv("TQ_DATA_FILE"):
            queue_data["data_file"] = os.getenv("TQ_DATA_FILE")
        if os.getenv("TQ_INITIAL_CAPACITY"):
            queue_data["initial_capacity"] = os.getenv("TQ_INITIAL_CAPACITY")
        if os.getenv("TQ_LOG_LEVEL"):
            queue_data["log_level"] = os.getenv("TQ_LOG_LEVEL")
        if os.getenv("TQ_LOG_FORMAT"):
            queue_data["log_format"] = os.getenv("TQ_LOG_FORMAT")

        return cls({"queue": queue_data})

    @classmethod
    def from_file(cls, config_path: str) -> 'ConfigManager':
        """Load configuration from a JSON file.

        Parameters:
            config_path: Path to configuration file

        Returns:
            ConfigManager instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {str(e)}")

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a JSON object")
        return cls(config_data)

    def get_queue_config(self) -> QueueConfig:
        """Get the validated queue configuration.

        Raises:
            pydantic.ValidationError: If a configured value is invalid
        """
        if self._queue_config is None:
            self._queue_config = QueueConfig(**self._config_data.get("queue", {}))
        return self._queue_config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Parameters:
            key: Configuration key (supports dot notation, e.g., "queue.data_file")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self._config_data

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default
