"""
Configuration loading for archive-sync.

Merges built-in defaults, an optional JSON file, and environment variable
overrides into a validated ArchiveSyncConfig.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

from pydantic import ValidationError

from core.models.config import ArchiveSyncConfig, GlobalSettings
from .defaults import DEFAULT_SETTINGS, ENV_VAR_MAPPING, STRING_CONFIG_KEYS

logger = logging.getLogger(__name__)


class ConfigurationLoader:
    """Load archive-sync configuration with file and environment overrides"""

    def __init__(self, global_settings: Optional[GlobalSettings] = None):
        self.global_settings = global_settings or GlobalSettings()

    def load(self, config_file: Optional[Union[str, Path]] = None) -> ArchiveSyncConfig:
        """
        Load configuration.

        Args:
            config_file: JSON file to read; defaults to the global config file

        Returns:
            Validated configuration; defaults are used for anything unset
        """
        config_data = copy.deepcopy(DEFAULT_SETTINGS)

        config_path = Path(config_file) if config_file else self.global_settings.default_config_file
        if config_path.exists():
            file_data = self._load_config_file(config_path)
            self._merge(config_data, file_data)
        elif config_file:
            logger.warning(f"Config file {config_path} does not exist, using defaults")

        config_data = self._apply_env_overrides(config_data)

        try:
            return ArchiveSyncConfig(**config_data)
        except ValidationError as e:
            logger.error(f"Invalid configuration, falling back to defaults: {e}")
            return ArchiveSyncConfig()

    def save(self, config: ArchiveSyncConfig, config_file: Optional[Union[str, Path]] = None) -> Path:
        """Save configuration as JSON and return the written path"""
        config_path = Path(config_file) if config_file else self.global_settings.default_config_file
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w', encoding='utf-8') as f:
            json.dump(config.to_dict(), f, indent=2, ensure_ascii=False)

        logger.info(f"Saved configuration to {config_path}")
        return config_path

    def _load_config_file(self, config_path: Path) -> Dict[str, Any]:
        """Read a JSON config file; an unreadable file counts as empty"""
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load config from {config_path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"Config file {config_path} must contain a JSON object")
            return {}
        return data

    def _merge(self, base: Dict[str, Any], overrides: Dict[str, Any]) -> None:
        """Recursively merge overrides into base"""
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                self._merge(base[key], value)
            else:
                base[key] = value

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration"""
        for env_var, config_path in ENV_VAR_MAPPING.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                self._set_nested_value(config_data, config_path, env_value)

        return config_data

    def _set_nested_value(self, data: Dict[str, Any], path: str, value: str) -> None:
        """Set nested dictionary value using dot notation path"""
        keys = path.split('.')
        current = data

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        if path in STRING_CONFIG_KEYS:
            current[keys[-1]] = value
        else:
            current[keys[-1]] = self._convert_env_value(value)

    def _convert_env_value(self, value: str) -> Any:
        """Convert environment variable string to appropriate type"""
        # Boolean conversion
        if value.lower() in ('true', 'yes', 'on'):
            return True
        elif value.lower() in ('false', 'no', 'off'):
            return False

        # Numeric conversion
        try:
            if '.' in value:
                return float(value)
            else:
                return int(value)
        except ValueError:
            pass

        # Return as string
        return value
