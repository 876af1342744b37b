"""Configuration management for saafsafai."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from . import SaafsafaiError

_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})


class ConfigError(SaafsafaiError):
    """Configuration is missing or cannot be parsed."""


def parse_bool(value: Any, default: bool) -> bool:
    """Interpret a config value as a boolean.

    Args:
        value: Raw value from the config file.
        default: Returned when ``value`` is None.

    Returns:
        Parsed boolean.

    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    return str(value).strip().lower() in _TRUE_STRINGS


def _expand(value: Any) -> Path:
    return Path(os.path.expanduser(str(value)))


@dataclass
class CleanupConfig:
    """Configuration for a cleanup run."""

    # Phase switches
    clean_downloads: bool = False
    delete_node_modules: bool = False

    # Where to look
    downloads_dir: Path = field(default_factory=lambda: Path.home() / "Downloads")
    scan_root: Path = field(default_factory=Path.home)

    # Logging
    log_dir: Path = field(default_factory=lambda: Path.home() / ".local/share/saafsafai/logs")
    log_level: str = "INFO"

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the default configuration file path."""
        return Path.home() / ".config/saafsafai/config.yaml"

    @classmethod
    def get_legacy_config_path(cls) -> Path:
        """Get the path of the JSON config written by earlier releases."""
        return Path.home() / ".config/saafsafai.json"

    @classmethod
    def load(cls, config_path: Path | None = None) -> CleanupConfig:
        """Load configuration from a YAML (or JSON) file.

        Args:
            config_path: Path to config file. Uses default if None.

        Returns:
            Loaded configuration.

        Raises:
            ConfigError: If the file is missing, unreadable or malformed.

        """
        if config_path is None:
            config_path = cls.get_config_path()
            legacy_path = cls.get_legacy_config_path()
            if not config_path.exists() and legacy_path.exists():
                config_path = legacy_path

        if not config_path.exists():
            raise ConfigError(
                f"Config file not found at {config_path}. Run 'saafsafai setup' to configure"
            )

        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Failed to read config file {config_path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> CleanupConfig:
        """Create config from dictionary."""
        config = cls()

        config.clean_downloads = parse_bool(data.get("clean_downloads"), config.clean_downloads)
        config.delete_node_modules = parse_bool(
            data.get("delete_node_modules"), config.delete_node_modules
        )

        if data.get("downloads_dir"):
            config.downloads_dir = _expand(data["downloads_dir"])
        if data.get("scan_root"):
            config.scan_root = _expand(data["scan_root"])

        logging_cfg = data.get("logging")
        if isinstance(logging_cfg, dict):
            if "directory" in logging_cfg:
                config.log_dir = _expand(logging_cfg["directory"])
            if "level" in logging_cfg:
                config.log_level = str(logging_cfg["level"]).upper()

        return config

    @property
    def log_file(self) -> Path:
        """Today's log file."""
        return self.log_dir / f"{date.today():%Y-%m-%d}.log"

    def save(self, config_path: Path | None = None) -> Path:
        """Save configuration to YAML file.

        Args:
            config_path: Path to save config. Uses default if None.

        Returns:
            The path written.

        """
        if config_path is None:
            config_path = self.get_config_path()

        # Ensure directory exists
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "clean_downloads": self.clean_downloads,
            "delete_node_modules": self.delete_node_modules,
            "downloads_dir": str(self.downloads_dir),
            "scan_root": str(self.scan_root),
            "logging": {
                "directory": str(self.log_dir),
                "level": self.log_level,
            },
        }

        with config_path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        return config_path
