"""
Configuration management for Istoria.

This module handles loading and accessing configuration values from config.yaml.
Values present in the file are merged over the built-in defaults, so a partial
file only needs to list what it changes.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict

import yaml


class ConfigManager:
    """
    Manages configuration loading and access for Istoria.
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        self._config = self._get_default_config()

        if not self.config_path.exists():
            logging.debug(f"Configuration file not found, using defaults: {self.config_path}")
            return

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Failed to load configuration: {e}")
            return

        if not isinstance(loaded, dict):
            logging.error(f"Ignoring configuration file {self.config_path}: top level is not a mapping")
            return

        self._merge(self._config, loaded)
        logging.info(f"Configuration loaded from {self.config_path}")

    @staticmethod
    def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                ConfigManager._merge(base[key], value)
            else:
                base[key] = value

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return copy.deepcopy({
            "database": {
                "filename": "istoria.db"
            },
            "paths": {
                "output_dir": "istoria-data",
                "export_dir": "notebooklm",
                "log_file": "istoria.log"
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "daylio": {
                "archive_entry": "backup.daylio"
            },
            "obsidian": {
                "extension": ".md",
                "reserved_dir": ".obsidian"
            },
            "export": {
                "interval": "month"
            }
        })

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "obsidian.extension")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("database.filename")  # Returns "istoria.db"
            config.get("paths.export_dir")   # Returns "notebooklm"
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def database_filename(self) -> str:
        """Get database filename."""
        return self.get("database.filename", "istoria.db")

    @property
    def output_directory(self) -> str:
        """Get the default output directory."""
        return self.get("paths.output_dir", "istoria-data")

    @property
    def export_directory(self) -> str:
        """Get the export directory name, relative to the output directory."""
        return self.get("paths.export_dir", "notebooklm")

    @property
    def log_filename(self) -> str:
        """Get log file name."""
        return self.get("paths.log_file", "istoria.log")

    @property
    def daylio_archive_entry(self) -> str:
        """Get the name of the payload entry inside a Daylio archive."""
        return self.get("daylio.archive_entry", "backup.daylio")

    @property
    def obsidian_extension(self) -> str:
        """Get the note file extension for Obsidian vaults."""
        return self.get("obsidian.extension", ".md")

    @property
    def obsidian_reserved_dir(self) -> str:
        """Get the Obsidian tooling directory that is never imported."""
        return self.get("obsidian.reserved_dir", ".obsidian")

    @property
    def export_interval(self) -> str:
        """Get the interval used when --export is given without one."""
        return self.get("export.interval", "month")


# Global configuration instance
config = ConfigManager()


def get_config() -> ConfigManager:
    """
    Get the global configuration instance.

    Returns:
        The global ConfigManager instance
    """
    return config
