"""
Config system - Layered typed configuration with validation.

Sources are merged with increasing precedence:
config files (JSON/YAML) < .env file < environment variables < overrides.
"""

from __future__ import annotations

import json
import logging
import os
import types
from dataclasses import dataclass, fields, MISSING
from pathlib import Path
from typing import Any, Dict, Optional, get_args, get_origin, get_type_hints

from .faults.domains import ConfigInvalidFault, ConfigMissingFault

logger = logging.getLogger("sqlrow.config")

__all__ = ["Settings", "ConfigLoader", "configure_logging"]


@dataclass
class Settings:
    """
    Runtime settings for sqlrow.

    Attributes:
        database_url: ``sqlite:///path/to/file.db`` or ``sqlite:///:memory:``
        log_level: Level name applied by ``configure_logging``
        echo_sql: Log every executed statement on ``sqlrow.db.sql``
        primary_key: Identity field name for entities defined via the registry
        connect_timeout: Seconds the driver waits on a locked database
    """

    database_url: str = "sqlite:///:memory:"
    log_level: str = "WARNING"
    echo_sql: bool = False
    primary_key: str = "id"
    connect_timeout: float = 5.0


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    Overrides > Environment variables > .env file > config files > defaults
    """

    def __init__(self, env_prefix: str = "SQLROW_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "SQLROW_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources.

        Args:
            paths: Config file paths (glob patterns supported; .json, .yaml, .yml)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for pattern in paths or []:
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load config from JSON or YAML files."""
        from glob import glob

        for path_str in sorted(glob(pattern)):
            path = Path(path_str)
            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)
            else:
                logger.warning(f"Ignoring config file with unknown suffix: {path}")

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
            self._merge_dict(self.config_data, data)

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        import yaml
        with open(path) as f:
            data = yaml.safe_load(f)
            if data:
                self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load prefixed keys from a .env file."""
        from dotenv import dotenv_values

        if not Path(path).exists():
            logger.debug(f"No .env file at {path}")
            return

        for key, value in dotenv_values(path).items():
            if key.startswith(self.env_prefix) and value is not None:
                self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert SQLROW_DATABASE_URL / SQLROW_A__B into (nested) keys."""
        key = key[len(self.env_prefix):]

        # Double underscore separates nesting levels
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current = self.config_data

        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def settings(self, config_class: type = Settings) -> Any:
        """
        Instantiate and validate a settings dataclass from the merged data.

        Raises:
            ConfigInvalidFault: A value has the wrong type
            ConfigMissingFault: A field without default was not provided
        """
        hints = get_type_hints(config_class)
        kwargs = {}

        for field_info in fields(config_class):
            name = field_info.name
            expected = hints.get(name, field_info.type)

            if name in self.config_data:
                value = self._coerce(self.config_data[name], expected)
                if not self._check_type(value, expected):
                    raise ConfigInvalidFault(
                        name,
                        f"expected {getattr(expected, '__name__', expected)}, "
                        f"got {type(value).__name__}",
                    )
                kwargs[name] = value
            elif field_info.default is not MISSING:
                kwargs[name] = field_info.default
            elif field_info.default_factory is not MISSING:
                kwargs[name] = field_info.default_factory()
            else:
                raise ConfigMissingFault(name)

        return config_class(**kwargs)

    @staticmethod
    def _coerce(value: Any, expected: Any) -> Any:
        # "5" parsed as int must still satisfy a float field
        if expected is float and isinstance(value, int) and not isinstance(value, bool):
            return float(value)
        # Numeric-looking strings for str fields (e.g. a password "1234")
        if expected is str and isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def _check_type(self, value: Any, expected_type: Any) -> bool:
        """Basic type checking."""
        origin = get_origin(expected_type)
        if origin is types.UnionType or str(origin) == "typing.Union":
            if value is None:
                return True
            return any(self._check_type(value, arg) for arg in get_args(expected_type) if arg is not type(None))

        if origin:
            return isinstance(value, origin)

        if expected_type is float and isinstance(value, bool):
            return False
        try:
            return isinstance(value, expected_type)
        except TypeError:
            return True

    def to_dict(self) -> dict:
        """Export all config as dictionary."""
        return self.config_data.copy()


def configure_logging(settings: Settings) -> None:
    """Apply ``settings.log_level`` to the root logger."""
    level = getattr(logging, settings.log_level.upper(), None)
    if not isinstance(level, int):
        raise ConfigInvalidFault("log_level", f"unknown level {settings.log_level!r}")

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("sqlrow").setLevel(level)
