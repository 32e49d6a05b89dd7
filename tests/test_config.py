"""
Tests for configuration loading and validation.
"""

import json
import os

import pytest

from pressbridge.config import BridgeConfig, ConfigLoader, build_bridge_config
from pressbridge.faults import ConfigInvalidFault


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run every test in an empty directory without PB_ variables."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("PB_"):
            monkeypatch.delenv(key)
    return tmp_path


class TestBuildBridgeConfig:
    def test_defaults(self):
        config = build_bridge_config()
        assert config == BridgeConfig()
        assert config.cache_backend == "memory"
        assert config.cache_key == "pressbridge:routes"
        assert config.route_name_prefix == "pressbridge_route_"
        assert config.legacy_method_suffix is True

    def test_from_dict(self):
        config = build_bridge_config({"home_path": "/blog/", "cache_backend": "redis"})
        assert config.home_path == "blog"
        assert config.cache_backend == "redis"

    def test_number_for_string_field(self):
        assert build_bridge_config({"home_path": 2024}).home_path == "2024"

    def test_int_for_bool_field(self):
        assert build_bridge_config({"cache_enabled": 0}).cache_enabled is False

    def test_wrong_type(self):
        with pytest.raises(ConfigInvalidFault) as exc_info:
            build_bridge_config({"cache_enabled": "maybe"})
        assert exc_info.value.metadata["key"] == "cache_enabled"
        assert exc_info.value.code == "CONFIG_INVALID"

    def test_unknown_key(self):
        with pytest.raises(ConfigInvalidFault, match="unknown"):
            build_bridge_config({"cache_ttl": 60})

    def test_unknown_backend(self):
        with pytest.raises(ConfigInvalidFault, match="cache_backend"):
            build_bridge_config({"cache_backend": "memcached"})

    def test_empty_cache_key(self):
        with pytest.raises(ConfigInvalidFault, match="cache_key"):
            build_bridge_config({"cache_key": ""})


class TestConfigLoader:
    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("PB_BRIDGE__HOME_PATH", "/site/")
        monkeypatch.setenv("PB_BRIDGE__CACHE_ENABLED", "false")
        loader = ConfigLoader.load()

        config = build_bridge_config(loader)
        assert config.home_path == "site"
        assert config.cache_enabled is False

    def test_yaml_file(self, isolated):
        (isolated / "bridge.yaml").write_text(
            "bridge:\n"
            "  home_path: wp\n"
            "  cache_backend: redis\n"
            "  redis_url: redis://cache:6379/1\n"
        )
        config = build_bridge_config(ConfigLoader.load(paths=["bridge.yaml"]))
        assert config.home_path == "wp"
        assert config.redis_url == "redis://cache:6379/1"

    def test_default_file_is_detected(self, isolated):
        (isolated / "pressbridge.yaml").write_text("bridge:\n  route_name_prefix: site_\n")
        assert build_bridge_config(ConfigLoader.load()).route_name_prefix == "site_"

    def test_json_file(self, isolated):
        (isolated / "bridge.json").write_text(json.dumps({"bridge": {"cache_key": "k"}}))
        assert build_bridge_config(ConfigLoader.load(paths=["*.json"])).cache_key == "k"

    def test_env_overrides_file_and_overrides_win(self, isolated, monkeypatch):
        (isolated / "bridge.yaml").write_text("bridge:\n  home_path: from-file\n  cache_key: file\n")
        monkeypatch.setenv("PB_BRIDGE__HOME_PATH", "from-env")
        loader = ConfigLoader.load(
            paths=["bridge.yaml"],
            overrides={"bridge": {"cache_key": "override"}},
        )
        config = build_bridge_config(loader)
        assert config.home_path == "from-env"
        assert config.cache_key == "override"

    def test_env_file(self, isolated):
        (isolated / ".env").write_text(
            "# bridge settings\n"
            "PB_BRIDGE__CACHE_BACKEND='null'\n"
            "OTHER=ignored\n"
        )
        loader = ConfigLoader.load(env_file=".env")
        assert loader.get("bridge.cache_backend") == "null"
        assert loader.get("other") is None

    def test_top_level_keys(self):
        loader = ConfigLoader.load(overrides={"home_path": "news", "unrelated": 1})
        assert loader.get_bridge_config() == {"home_path": "news"}

    def test_parse_values(self):
        loader = ConfigLoader()
        assert loader._parse_value("yes") is True
        assert loader._parse_value("12") == 12
        assert loader._parse_value("1.5") == 1.5
        assert loader._parse_value('{"a": 1}') == {"a": 1}
        assert loader._parse_value("redis://x") == "redis://x"

    def test_get_default(self):
        assert ConfigLoader().get("bridge.home_path", "fallback") == "fallback"
