"""Configuration management for the CLI."""

import os
from pathlib import Path
from typing import Any

import yaml

from confstore.storage.connections import DEFAULT_TARGET, ConnectionManager


class Config:
    """Configuration management for the CLI application."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file: {e}")
        except Exception as e:
            raise ValueError(f"Error reading config file: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")
        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the default configuration file paths to check."""
        paths = []

        # User config
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        paths.append(xdg_config_home / "confstore" / "config.yaml")

        # Project config
        paths.append(Path(".confstore.yaml"))
        paths.append(Path("confstore.yaml"))

        return paths

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result


def load_config() -> dict[str, Any]:
    """Load configuration from files and environment variables."""
    config = {}

    # Last file wins for conflicting keys
    for path in Config.get_config_paths():
        if path.exists():
            config = Config.merge_configs(config, Config.from_file(path))

    env_overrides: dict[str, Any] = {}
    if storage := os.environ.get("CONFSTORE_STORAGE"):
        env_overrides["storage"] = storage
    if db_path := os.environ.get("CONFSTORE_DB_PATH"):
        env_overrides["connections"] = {DEFAULT_TARGET: db_path}

    return Config.merge_configs(config, env_overrides)


def default_storage() -> str:
    """Get the specifier used when nothing is configured."""
    xdg_data_home = Path(
        os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
    )
    return f"file:{xdg_data_home / 'confstore'}"


def build_connections(config: dict[str, Any]) -> ConnectionManager:
    """Create a connection manager from the ``connections`` section."""
    targets = config.get("connections") or {}
    if not isinstance(targets, dict):
        raise ValueError("'connections' must map target names to database paths")
    return ConnectionManager({str(name): str(path) for name, path in targets.items()})


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
