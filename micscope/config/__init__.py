"""Simple YAML configuration loader for micscope."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from .session import (
    ConfigurationError,
    SessionConfig,
    PROFILES,
    WINDOW_NORMALIZATIONS,
    SPECTRUM_SCALINGS,
)

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "audio": {
        "device_index": None,
        "channels": None,
        "frames_per_buffer": None,  # None follows the analyzer frame_size
        "sample_rate": None,
    },
    # Unset analyzer keys fall back to the profile, then to SessionConfig defaults
    "analyzer": {
        "profile": None,
    },
    "publisher": {
        "topic": "spectrum.frame",
        "session_topic": "spectrum.session",
    },
    "display": {
        "bands": 64,
        "refresh_per_second": 20,
        "min_frequency_hz": 20.0,
    },
    "logging": {
        "level": "INFO",
        "file_path": "logs/micscope.log",
        "console_output": True,
    },
}


class MicscopeConfig:
    """micscope configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, the built-in
                        defaults are used.
        """
        self.config_file = Path(config_path) if config_path else None

        if self.config_file is None:
            logger.info("No configuration file given, using defaults")
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            return

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file, layered over the defaults."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if not loaded:
            raise ValueError("Configuration file is empty")
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        config = _merge(copy.deepcopy(DEFAULT_CONFIG), loaded)

        # Resolve relative paths
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        # Resolve log file path
        if 'logging' in config and config['logging'].get('file_path'):
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'analyzer.frame_size').

        Args:
            key_path: Dot-separated key path (e.g., 'audio.device_index')
            default: Default value if key not found or set to null

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return default if value is None else value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'analyzer.profile')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict or config_dict[key] is None:
                config_dict[key] = {}
            config_dict = config_dict[key]

        # Set the final value
        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_log_file_path(self) -> str:
        """Get log file path."""
        log_path = self.get('logging.file_path', 'logs/micscope.log')
        return str(Path(log_path).absolute())


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


__all__ = [
    "MicscopeConfig",
    "DEFAULT_CONFIG",
    "ConfigurationError",
    "SessionConfig",
    "PROFILES",
    "WINDOW_NORMALIZATIONS",
    "SPECTRUM_SCALINGS",
]
