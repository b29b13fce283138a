"""Configuration manager for loading and validating .retrier.yml"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from retrier.domain.config import AppConfig, OutputConfig, RetrySpec

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".retrier.yml"


class ConfigurationError(Exception):
    """Configuration validation error."""

    pass


def _format_validation_error(e: ValidationError) -> str:
    errors = []
    for error in e.errors():
        field = ".".join(str(x) for x in error["loc"])
        msg = error["msg"]
        errors.append(f"  - {field}: {msg}")
    return "Configuration validation failed:\n" + "\n".join(errors)


class ConfigManager:
    """Manages configuration from .retrier.yml and environment variables

    Loads configuration with validation using Pydantic models. Configuration priority:
    1. Default values (DEFAULT_CONFIG)
    2. .retrier.yml file (searched from current directory)
    3. Environment variables (RETRIER_*)
    4. CLI arguments (passed as overrides to the getters)
    """

    DEFAULT_CONFIG = {
        "retry": {
            "attempts": 3,
            "backoff": False,
            "consecutive": 0,
            "invert": False,
            "jitter": "0s",
            "sleep": "5s",
            "task_time": "0s",
            "total_time": "1m",
        },
        "output": {
            "quiet": False,
            "verbose": False,
        },
    }

    # Environment variable -> (section, key)
    ENV_OVERRIDES = {
        "RETRIER_ATTEMPTS": ("retry", "attempts"),
        "RETRIER_BACKOFF": ("retry", "backoff"),
        "RETRIER_CONSECUTIVE": ("retry", "consecutive"),
        "RETRIER_INVERT": ("retry", "invert"),
        "RETRIER_JITTER": ("retry", "jitter"),
        "RETRIER_SLEEP": ("retry", "sleep"),
        "RETRIER_TASK_TIME": ("retry", "task_time"),
        "RETRIER_MAX_TIME": ("retry", "total_time"),
        "RETRIER_QUIET": ("output", "quiet"),
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager

        Args:
            config_path: Path to .retrier.yml (searches from current dir if None)

        Raises:
            ConfigurationError: If configuration validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: AppConfig = self._load_config()
        except ValidationError as e:
            raise ConfigurationError(_format_validation_error(e)) from e

    def _find_config_file(self) -> Optional[Path]:
        """Find .retrier.yml file starting from current directory

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILE_NAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return None

    def _load_config(self) -> AppConfig:
        """Load configuration from file and validate with Pydantic

        Raises:
            ValidationError: If configuration is invalid
            ConfigurationError: If the config file cannot be read
        """
        config_dict = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Failed to load config from {self.config_path}: {e}") from e
            if not isinstance(file_config, dict):
                raise ConfigurationError(f"Config file {self.config_path} must contain a mapping")
            config_dict = self._merge_config(config_dict, file_config)
            logger.info(f"Loaded configuration from {self.config_path}")

        config_dict = self._apply_env_overrides(config_dict)

        return AppConfig(**config_dict)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries"""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply RETRIER_* environment variable overrides

        Values are passed as strings; pydantic coerces them ("true", "3", "10s").
        """
        for env_name, (section, key) in self.ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                logger.debug(f"Applying {env_name}={value}")
                config.setdefault(section, {})[key] = value
        return config

    def get_retry_spec(self, overrides: Optional[Dict[str, Any]] = None) -> RetrySpec:
        """Get retry spec, with optional overrides applied

        Args:
            overrides: Field values taking precedence over the loaded config

        Returns:
            Validated retry spec

        Raises:
            ConfigurationError: If an override is invalid
        """
        if not overrides:
            return self.config.retry
        try:
            return RetrySpec(**{**self.config.retry.model_dump(), **overrides})
        except ValidationError as e:
            raise ConfigurationError(_format_validation_error(e)) from e

    def get_output_config(self, overrides: Optional[Dict[str, Any]] = None) -> OutputConfig:
        """Get output configuration, with optional overrides applied"""
        if not overrides:
            return self.config.output
        try:
            return OutputConfig(**{**self.config.output.model_dump(), **overrides})
        except ValidationError as e:
            raise ConfigurationError(_format_validation_error(e)) from e
