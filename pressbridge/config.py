"""
Config system - Layered configuration for the bridge.

Sources are merged with precedence (later overrides earlier):
config files (YAML/JSON) > .env file > environment variables > overrides.
"""

from typing import Any, Dict, Optional, get_type_hints
from dataclasses import dataclass, fields
from pathlib import Path
import os
import json

from .faults import ConfigInvalidFault


@dataclass
class BridgeConfig:
    """
    Bridge configuration.

    Attributes:
        home_path: Base path of the CMS install; stripped from request
                   paths before matching (e.g. "blog" for example.com/blog/)
        cache_enabled: Store the compiled route table in a cache backend
        cache_backend: "memory", "redis" or "null"
        cache_key: Key the route table is stored under
        redis_url: Redis connection URL (redis backend only)
        redis_key_prefix: Prefix for every Redis key we write
        route_name_prefix: Prefix of the names handed to the host router
        legacy_method_suffix: Invoke ``action__GET``-style variants when a
                              controller defines them
    """
    home_path: str = ""
    cache_enabled: bool = True
    cache_backend: str = "memory"
    cache_key: str = "pressbridge:routes"
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "pb:"
    route_name_prefix: str = "pressbridge_route_"
    legacy_method_suffix: bool = True


_CACHE_BACKENDS = ("memory", "redis", "null")


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources.

    Environment variables use the ``PB_`` prefix; a double underscore
    nests keys (``PB_BRIDGE__HOME_PATH=blog``).
    """

    def __init__(self, env_prefix: str = "PB_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "PB_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources.

        Args:
            paths: Config file paths (glob patterns supported)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        if not paths and Path("pressbridge.yaml").exists():
            paths = ["pressbridge.yaml"]

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
        """Load config from .env file."""
        env_path = Path(path)
        if not env_path.exists():
            return

        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue

                if "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip().strip('"').strip("'")

                    if key.startswith(self.env_prefix):
                        self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert PB_BRIDGE__CACHE_BACKEND to nested dict."""
        key = key[len(self.env_prefix):]
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

    def get_bridge_config(self) -> dict:
        """
        Get bridge configuration section.

        Reads the ``bridge`` section, falling back to top-level keys.
        """
        section = self.get("bridge", None)
        if isinstance(section, dict):
            return dict(section)
        names = {f.name for f in fields(BridgeConfig)}
        return {k: v for k, v in self.config_data.items() if k in names}

    def to_dict(self) -> dict:
        """Export all config as dictionary."""
        return self.config_data.copy()


def build_bridge_config(source: Any = None) -> BridgeConfig:
    """
    Build a validated BridgeConfig.

    Args:
        source: A ConfigLoader, a plain dict, or None for defaults

    Raises:
        ConfigInvalidFault: On unknown keys, wrong types or bad values
    """
    if source is None:
        data: Dict[str, Any] = {}
    elif isinstance(source, ConfigLoader):
        data = source.get_bridge_config()
    else:
        data = dict(source)

    hints = get_type_hints(BridgeConfig)
    kwargs = {}
    for field_info in fields(BridgeConfig):
        name = field_info.name
        if name not in data:
            continue
        value = data[name]
        expected = hints[name]
        if expected is str and isinstance(value, (int, float)) and not isinstance(value, bool):
            # "PB_BRIDGE__HOME_PATH=2024" arrives as a number
            value = str(value)
        if expected is bool and value in (0, 1) and not isinstance(value, bool):
            value = bool(value)
        if not isinstance(value, expected):
            raise ConfigInvalidFault(
                name, f"expected {expected.__name__}, got {type(value).__name__}"
            )
        kwargs[name] = value

    unknown = set(data) - {f.name for f in fields(BridgeConfig)}
    if unknown:
        raise ConfigInvalidFault(sorted(unknown)[0], "unknown configuration key")

    config = BridgeConfig(**kwargs)

    if config.cache_backend.lower() not in _CACHE_BACKENDS:
        raise ConfigInvalidFault(
            "cache_backend",
            f"must be one of {', '.join(_CACHE_BACKENDS)}",
        )
    if not config.cache_key:
        raise ConfigInvalidFault("cache_key", "must not be empty")

    config.home_path = config.home_path.strip("/")
    return config
