"""
Tests for configuration management.

Covers defaults, TOML loading, environment overrides and validation.
"""

from pathlib import Path

import pytest

from bhavscope.core.config import (
    BhavscopeConfig,
    ConfigManager,
    HistoryConfig,
    get_default_config,
    load_config_from_env,
)
from bhavscope.core.exceptions import ConfigurationError

_ENV_VARS = (
    "BHAVSCOPE_WINDOW_DAYS",
    "BHAVSCOPE_MAX_CONCURRENCY",
    "BHAVSCOPE_TOP_N",
    "BHAVSCOPE_SNAPSHOT_DIR",
    "BHAVSCOPE_STORE_URL",
    "BHAVSCOPE_LOG_LEVEL",
    "BHAVSCOPE_CLOUD_NAME",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_default_values(self):
        config = get_default_config()

        assert config.history.window_days == 21
        assert config.history.max_concurrency == 8
        assert config.history.top_n == 20
        assert config.store.base_url is None
        assert config.store.snapshot_dir.endswith("snapshots")
        assert config.logging.level == "WARNING"

    @pytest.mark.parametrize(
        "kwargs",
        [{"window_days": 0}, {"max_concurrency": 0}, {"top_n": -1}],
    )
    def test_history_validation(self, kwargs):
        with pytest.raises(ConfigurationError):
            HistoryConfig(**kwargs)

    def test_round_trip_through_dict(self):
        config = BhavscopeConfig.from_dict({"history": {"window_days": 10}})

        assert BhavscopeConfig.from_dict(config.to_dict()) == config

    def test_unknown_key_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            BhavscopeConfig.from_dict({"history": {"unknown": 1}})


class TestConfigManager:
    def test_missing_file_uses_defaults(self, tmp_path: Path):
        manager = ConfigManager(tmp_path / "absent.toml")

        assert manager.get_config() == BhavscopeConfig()

    def test_loads_toml_file(self, tmp_path: Path):
        path = tmp_path / "config.toml"
        path.write_text(
            '[history]\nwindow_days = 10\ntop_n = 5\n\n[store]\nbase_url = "https://backend.test"\n',
            encoding="utf-8",
        )

        config = ConfigManager(path).get_config()

        assert config.history.window_days == 10
        assert config.history.top_n == 5
        assert config.store.base_url == "https://backend.test"

    def test_malformed_toml_falls_back_to_defaults(self, tmp_path: Path):
        path = tmp_path / "config.toml"
        path.write_text("[history\nwindow_days = ", encoding="utf-8")

        assert ConfigManager(path).get_config() == BhavscopeConfig()

    def test_environment_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        path = tmp_path / "config.toml"
        path.write_text("[history]\nwindow_days = 10\n", encoding="utf-8")
        monkeypatch.setenv("BHAVSCOPE_WINDOW_DAYS", "5")
        monkeypatch.setenv("BHAVSCOPE_SNAPSHOT_DIR", str(tmp_path))

        config = ConfigManager(path).get_config()

        assert config.history.window_days == 5
        assert config.store.snapshot_dir == str(tmp_path)

    def test_environment_ignored_when_disabled(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BHAVSCOPE_WINDOW_DAYS", "5")

        config = ConfigManager(tmp_path / "absent.toml", use_env=False).get_config()

        assert config.history.window_days == 21

    def test_update_config(self, tmp_path: Path):
        manager = ConfigManager(tmp_path / "absent.toml")

        manager.update_config(history={"max_concurrency": 2})

        assert manager.get_config().history.max_concurrency == 2
        assert manager.get_config().history.window_days == 21


class TestEnvironment:
    def test_load_config_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BHAVSCOPE_TOP_N", "7")
        monkeypatch.setenv("BHAVSCOPE_STORE_URL", "https://backend.test")
        monkeypatch.setenv("BHAVSCOPE_LOG_LEVEL", "DEBUG")

        assert load_config_from_env() == {
            "history": {"top_n": 7},
            "store": {"base_url": "https://backend.test"},
            "logging": {"level": "DEBUG"},
        }

    def test_cloud_name_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        path = tmp_path / "config.toml"
        path.write_text('[store]\ncloud_name = "from-file"\n\n[logging]\nfile = "bhav.log"\n', encoding="utf-8")

        assert ConfigManager(path, use_env=False).get_config().store.cloud_name == "from-file"
        assert ConfigManager(path, use_env=False).get_config().logging.file == "bhav.log"

        monkeypatch.setenv("BHAVSCOPE_CLOUD_NAME", "demo")

        assert ConfigManager(path).get_config().store.cloud_name == "demo"

    def test_invalid_integer(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BHAVSCOPE_MAX_CONCURRENCY", "many")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config_from_env()

        assert exc_info.value.setting == "BHAVSCOPE_MAX_CONCURRENCY"
