"""Configuration manager for loading and validating .tablediff.yml"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from tablediff.domain.config import (
    AppConfig,
    ColumnsConfig,
    DiffConfig,
    GitLabConfig,
    RetryConfig,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".tablediff.yml"


class ConfigurationError(Exception):
    """Configuration validation error."""

    pass


class ConfigManager:
    """Manages configuration from .tablediff.yml and environment variables

    Configuration priority:
    1. Default values
    2. .tablediff.yml file (searched upward from the current directory)
    3. Environment variables (TABLEDIFF_*)
    4. CLI arguments (handled by CLI layer)
    """

    DEFAULT_CONFIG = {
        "diff": {
            "source": "git",
            "revision": "HEAD",
            "cache_ttl_seconds": 5.0,
            "git_timeout": 10.0,
        },
        "columns": {
            "fuzzy_threshold": 0.6,
            "sampling_threshold": 0.8,
            "max_sample_rows": 50,
        },
        "gitlab": {
            "url": None,
            "token": None,
            "project_id": None,
        },
        "retry": {
            "max_attempts": 3,
            "backoff_multiplier": 2,
            "initial_delay": 1,
            "jitter": 0.1,
        },
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager

        Args:
            config_path: Path to .tablediff.yml (searches from current dir if None)

        Raises:
            ConfigurationError: If configuration validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: AppConfig = self._load_config()
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                msg = error["msg"]
                errors.append(f"  - {field}: {msg}")
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(errors)
            ) from e

    def _find_config_file(self) -> Optional[Path]:
        """Find .tablediff.yml starting from current directory

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
        """
        config_dict = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
                config_dict = self._merge_config(config_dict, file_config)
                logger.info(f"Loaded configuration from {self.config_path}")
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config from {self.config_path}: {e}")
                logger.info("Using default configuration")

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
        """Apply environment variable overrides

        Args:
            config: Configuration dictionary

        Returns:
            Configuration with env overrides applied
        """
        if os.getenv("TABLEDIFF_DIFF_SOURCE"):
            config["diff"]["source"] = os.getenv("TABLEDIFF_DIFF_SOURCE")

        if os.getenv("TABLEDIFF_REVISION"):
            config["diff"]["revision"] = os.getenv("TABLEDIFF_REVISION")

        # Left as a string; pydantic coerces and validates it
        if os.getenv("TABLEDIFF_CACHE_TTL"):
            config["diff"]["cache_ttl_seconds"] = os.getenv("TABLEDIFF_CACHE_TTL")

        return config

    def get_diff_config(self) -> DiffConfig:
        return self.config.diff

    def get_columns_config(self) -> ColumnsConfig:
        return self.config.columns

    def get_gitlab_config(self) -> GitLabConfig:
        return self.config.gitlab

    def get_retry_config(self) -> RetryConfig:
        return self.config.retry

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key (supports dot notation)

        Args:
            key: Configuration key (e.g., "diff.revision" or "diff")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split(".")
        value = self.config.model_dump()
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value
