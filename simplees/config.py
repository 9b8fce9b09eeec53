"""Configuration loading and client construction."""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from .backends.base import SearchClient
from .backends.fields import FieldConfiguration
from .backends.memory import MemoryClient
from .backends.whoosh import WhooshClient
from .exceptions import ConfigError
from .pagination import DEFAULT_PER_PAGE

logger = logging.getLogger(__name__)

BACKENDS = ("whoosh", "memory")


def default_index_dir() -> Path:
    """Default location of on-disk indexes."""
    xdg_cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    return xdg_cache_home / "simplees" / "index"


def default_config() -> dict[str, Any]:
    return {
        "backend": "whoosh",
        "index_dir": str(default_index_dir()),
        "per_page": DEFAULT_PER_PAGE,
        "indexes": {},
    }


class Config:
    """Configuration file handling."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file.

        Raises:
            ConfigError: If the file cannot be read or is not a YAML mapping
        """
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Error reading config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the default configuration file paths, lowest precedence first."""
        paths = []

        # User config
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        paths.append(xdg_config_home / "simplees" / "config.yaml")

        # Project config
        paths.append(Path(".simplees.yaml"))
        paths.append(Path("simplees.yaml"))

        return paths

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result


def get_config_paths() -> list[Path]:
    """Get configuration paths in precedence order."""
    return Config.get_config_paths()


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from defaults, files and environment variables.

    Args:
        path: Explicit config file, applied after the default locations

    Raises:
        ConfigError: If the explicit file is invalid, or an environment
            override has the wrong type
    """
    config = default_config()

    for candidate in get_config_paths():
        if candidate.exists():
            try:
                config = Config.merge_configs(config, Config.from_file(candidate))
            except ConfigError as e:
                logger.warning(f"Ignoring config file: {e}")

    if path is not None:
        config = Config.merge_configs(config, Config.from_file(path))

    # Override with environment variables
    env_overrides: dict[str, Any] = {}
    if backend := os.environ.get("SIMPLEES_BACKEND"):
        env_overrides["backend"] = backend
    if index_dir := os.environ.get("SIMPLEES_INDEX_DIR"):
        env_overrides["index_dir"] = index_dir
    if per_page := os.environ.get("SIMPLEES_PER_PAGE"):
        try:
            env_overrides["per_page"] = int(per_page)
        except ValueError:
            raise ConfigError(f"SIMPLEES_PER_PAGE must be an integer: {per_page}")

    return Config.merge_configs(config, env_overrides)


def create_client(config: dict[str, Any]) -> SearchClient:
    """Build the search client described by ``config``.

    Raises:
        ConfigError: If the backend is unknown or field definitions are invalid
    """
    backend = str(config.get("backend", "whoosh")).lower()

    if backend == "memory":
        return MemoryClient()

    if backend == "whoosh":
        indexes = {
            name: FieldConfiguration.from_mapping(fields)
            for name, fields in (config.get("indexes") or {}).items()
        }
        index_dir = config.get("index_dir")
        return WhooshClient(
            index_dir=Path(index_dir) if index_dir else None, indexes=indexes
        )

    raise ConfigError(f"Unknown backend: {backend} (expected one of {', '.join(BACKENDS)})")


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
