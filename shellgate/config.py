"""
Configuration management for the Shell Gateway.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import json
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from .constants import (
    CONFIG_DIR_PERMISSIONS,
    CONFIG_FILE_PERMISSIONS,
    DEFAULT_LANG,
    DEFAULT_LINUX_USER,
    DEFAULT_TERM,
    DOWNLOAD_TIMEOUT,
    MAX_CONFIG_FILE_SIZE,
    MAX_READ_FILE_SIZE,
    get_data_dir,
    get_default_config_path,
)
from .exceptions import ConfigurationError
from .paths import PathResolutionMode
from .utils.logger import get_logger
from .utils.validators import sanitize_config_json, validate_config_json

logger = get_logger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "root_directory": None,
    "path_resolution_mode": PathResolutionMode.LENIENT.value,
    "download_timeout": DOWNLOAD_TIMEOUT,
    "max_read_size": MAX_READ_FILE_SIZE,
    "debug_mode": False,
    "verbose_logging": False,
    "log_file": None,
    "terminal_type": DEFAULT_TERM,
    "language": DEFAULT_LANG,
    "linux_user": DEFAULT_LINUX_USER,
}


class Config:
    """Manages configuration for the Shell Gateway."""

    def __init__(self, config_file: Optional[str] = None) -> None:
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration file
        """
        self._batch_mode = False
        self.config_file = str(config_file) if config_file else str(get_default_config_path())
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration from file, falling back to defaults.

        Returns:
            Configuration dictionary with every known key present
        """
        config = DEFAULT_CONFIG.copy()
        try:
            if os.path.exists(self.config_file):
                file_size = os.path.getsize(self.config_file)
                if file_size > MAX_CONFIG_FILE_SIZE:
                    raise ValueError(f"Config file too large: {file_size} bytes")

                with open(self.config_file, "r", encoding="utf-8") as f:
                    data = json.load(f)

                try:
                    validate_config_json(data)
                except ValueError as e:
                    logger.error(f"Invalid configuration structure: {e}")
                    logger.info("Using default configuration due to validation failure")
                    return config

                config.update(sanitize_config_json(data))
                logger.debug(f"Loaded configuration from {self.config_file}")
                return config

        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in config file {self.config_file}: {e}")
        except PermissionError as e:
            logger.error(f"Permission denied reading config file {self.config_file}: {e}")
        except OSError as e:
            logger.error(f"Error reading config file {self.config_file}: {e}")
        except ValueError as e:
            logger.error(f"Config file validation error: {e}")

        logger.debug("Using default configuration")
        return config

    def save_config(self) -> None:
        """
        Save current configuration to file.

        Raises:
            ConfigurationError: If saving fails
        """
        if self._batch_mode:
            return

        try:
            config_dir = Path(self.config_file).parent
            config_dir.mkdir(parents=True, exist_ok=True)

            try:
                os.chmod(config_dir, CONFIG_DIR_PERMISSIONS)
            except OSError as e:
                logger.warning(f"Failed to set permissions on config directory: {e}")

            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(self.config, f, indent=2, ensure_ascii=False)

            try:
                os.chmod(self.config_file, CONFIG_FILE_PERMISSIONS)
            except OSError as e:
                logger.warning(f"Failed to set permissions on config file: {e}")

            logger.info(f"Saved configuration to {self.config_file}")

        except PermissionError as e:
            raise ConfigurationError(f"Permission denied saving config: {e}")
        except OSError as e:
            raise ConfigurationError(f"Failed to save config: {e}")

    def get(self, key: str, default: Optional[Any] = None) -> Optional[Any]:
        """
        Get configuration value.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Set and persist a configuration value.

        Args:
            key: Configuration key
            value: Configuration value

        Raises:
            ConfigurationError: If the key is unknown or the value invalid
        """
        self.update_settings({key: value})

    def update_settings(self, settings: Dict[str, Any]) -> None:
        """
        Update multiple settings at once.

        Args:
            settings: Dictionary of settings to update

        Raises:
            ConfigurationError: If a key is unknown or a value invalid
        """
        unknown = [key for key in settings if key not in DEFAULT_CONFIG]
        if unknown:
            raise ConfigurationError(f"Unknown configuration key: {', '.join(unknown)}")
        try:
            validate_config_json(settings)
        except ValueError as e:
            raise ConfigurationError(str(e))

        self.config.update(settings)
        self.save_config()

    def get_all_settings(self) -> Dict[str, Any]:
        """Get all settings as a dictionary."""
        return self.config.copy()

    def init_config(self) -> None:
        """Initialize configuration file with defaults."""
        if os.path.exists(self.config_file):
            logger.info(f"Configuration file already exists: {self.config_file}")
            return

        try:
            self.save_config()
            logger.info(f"Created configuration file: {self.config_file}")
        except ConfigurationError as e:
            logger.error(f"Failed to create configuration file: {e}")
            raise

    @contextmanager
    def batch_update(self) -> Iterator[None]:
        """Context manager for batch updates without intermediate saves."""
        self._batch_mode = True
        try:
            yield
        finally:
            self._batch_mode = False
            self.save_config()

    def get_root_directory(self) -> Path:
        """Get the app-private data directory, honouring SHELLGATE_ROOT."""
        if os.environ.get("SHELLGATE_ROOT"):
            return get_data_dir()
        root = self.config.get("root_directory")
        if root:
            return Path(root).expanduser()
        return get_data_dir()

    def get_path_resolution_mode(self) -> PathResolutionMode:
        """Get the resolver fallback mode."""
        value = self.config.get("path_resolution_mode", PathResolutionMode.LENIENT.value)
        try:
            return PathResolutionMode(value)
        except ValueError:
            logger.warning(f"Invalid path resolution mode {value}, using lenient")
            return PathResolutionMode.LENIENT

    def get_download_timeout(self) -> int:
        """Get the download connect/read timeout in seconds."""
        value = self.config.get("download_timeout", DOWNLOAD_TIMEOUT)
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            return value
        logger.warning(f"Invalid download timeout {value}, using default {DOWNLOAD_TIMEOUT}")
        return DOWNLOAD_TIMEOUT

    def get_max_read_size(self) -> int:
        """Get the largest file size read_file will return."""
        value = self.config.get("max_read_size", MAX_READ_FILE_SIZE)
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            return value
        logger.warning(f"Invalid max read size {value}, using default {MAX_READ_FILE_SIZE}")
        return MAX_READ_FILE_SIZE
