"""Configuration management for rowpick."""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import yaml

from rowpick.core.errors import ConfigError
from rowpick.utils.logging import get_logger

logger = get_logger(__name__)

CONFIG_ENV_VAR = "ROWPICK_CONFIG"
DEFAULT_CONFIG_FILE = "config.yml"

DEFAULTS: Dict[str, Any] = {
    "db": {
        "default_schema": "public",
        "default_column": "id",
        # name -> {host, port, database, username, password, driver} or {url}
        "connection_by_name": {},
    },
    "cherry_pick": {
        "output_format": "insert-statement",
    },
}


def _merge_into(target: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into ``target`` in place, nested dicts key by key."""
    for key, value in override.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            _merge_into(current, value)
        else:
            target[key] = copy.deepcopy(value)
    return target


class Config:
    """Configuration manager for rowpick.

    Wraps a nested dict read with dot-notation keys. Values from a YAML file
    are merged over ``DEFAULTS``.

    Example:
        >>> config = Config.from_yaml("config.yml")
        >>> config.default_schema
        'public'
        >>> config.get_connection("staging")["host"]
        'localhost'
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """Initialize configuration.

        Args:
            config_dict: Configuration dictionary. If None, uses defaults.
        """
        self._config = config_dict if config_dict is not None else copy.deepcopy(DEFAULTS)

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> Config:
        """Load configuration from a YAML file, merged over the defaults.

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigError: If the file is not a mapping at the top level
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.is_file():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        logger.info(f"Loading config from {yaml_path}")
        loaded = yaml.safe_load(yaml_path.read_text()) or {}

        if not isinstance(loaded, dict):
            raise ConfigError(
                f"Config file {yaml_path} must contain a mapping at the top level",
                details={"config_path": str(yaml_path)},
            )

        return cls(_merge_into(copy.deepcopy(DEFAULTS), loaded))

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key, e.g. ``db.default_schema``."""
        node: Any = self._config
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a value by dot-notation key, creating intermediate mappings."""
        *parents, leaf = key.split(".")
        node = self._config
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value

    @property
    def default_schema(self) -> str:
        return self.get("db.default_schema") or "public"

    @property
    def default_column(self) -> str:
        return self.get("db.default_column") or "id"

    @property
    def output_format(self) -> str:
        return self.get("cherry_pick.output_format") or "insert-statement"

    @property
    def connections(self) -> Dict[str, Any]:
        """Registered connection blocks by name."""
        return self.get("db.connection_by_name") or {}

    def get_connection(self, name: str) -> Dict[str, Any]:
        """Get a named database connection block.

        Args:
            name: Connection name under ``db.connection_by_name``

        Returns:
            Copy of the connection configuration

        Raises:
            ConfigError: If the connection is not registered or not a mapping
        """
        connections = self.connections
        if name not in connections:
            raise ConfigError(
                f"Source db {name} is not registered. "
                f"Available: {sorted(connections)}",
                details={"source_db": name},
            )

        connection = connections[name]
        if not isinstance(connection, dict):
            raise ConfigError(
                f"Connection config for {name} must be a mapping",
                details={"source_db": name},
            )
        return dict(connection)

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._config)

    def save(self, yaml_path: str | Path) -> None:
        """Write the configuration to a YAML file."""
        yaml_path = Path(yaml_path)
        yaml_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Saving config to {yaml_path}")
        yaml_path.write_text(
            yaml.safe_dump(self._config, default_flow_style=False, sort_keys=False)
        )

    def __repr__(self) -> str:
        """String representation with passwords masked."""
        masked = self.to_dict()
        for connection in (masked.get("db", {}).get("connection_by_name") or {}).values():
            if isinstance(connection, dict) and connection.get("password"):
                connection["password"] = "***"
        return f"Config({masked})"


# Global config instance
_global_config: Optional[Config] = None


def _config_candidates() -> Iterator[Path]:
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        if path.is_file():
            yield path
        else:
            logger.warning(f"{CONFIG_ENV_VAR} points to missing file {path}, ignoring it")
    yield Path(DEFAULT_CONFIG_FILE)


def get_config() -> Config:
    """Get the global configuration instance.

    On first use loads ``$ROWPICK_CONFIG``, else ``./config.yml``, else the
    defaults.
    """
    global _global_config
    if _global_config is None:
        path = next((p for p in _config_candidates() if p.is_file()), None)
        _global_config = Config.from_yaml(path) if path else Config()
    return _global_config


def set_config(config: Optional[Config]) -> None:
    """Replace the global configuration, or reset it with None."""
    global _global_config
    _global_config = config


def load_config(yaml_path: str | Path) -> Config:
    """Load configuration from YAML and set it as the global instance."""
    config = Config.from_yaml(yaml_path)
    set_config(config)
    return config
