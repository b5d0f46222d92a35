"""Tests for CLI configuration management."""

import logging
from pathlib import Path

import pytest
import yaml

from dmrelay.cli.utils.config import ConfigError, ConfigManager, _parse_bool, _parse_timeout
from dmrelay.cli.utils.runtime import build_catalog
from dmrelay.client import Operation, Scope


@pytest.fixture
def manager(tmp_path: Path) -> ConfigManager:
    return ConfigManager(tmp_path / "cfg")


class TestConfigManager:
    def test_load_missing_raises(self, manager: ConfigManager) -> None:
        assert not manager.exists()
        with pytest.raises(ConfigError, match="dmrelay init"):
            manager.load()

    def test_save_and_load(self, manager: ConfigManager) -> None:
        manager.save("https://api.test/api", "alice", Scope.ADMIN, "tok", timeout=5.0)
        config = manager.load()
        assert config.api_url == "https://api.test/api"
        assert config.user_id == "alice"
        assert config.role is Scope.ADMIN
        assert config.token == "tok"
        assert config.timeout == 5.0
        assert config.http2 is True
        assert config.db_path == manager.config_dir / "offline.db"
        assert "tok" not in repr(config)

    def test_invalid_yaml(self, manager: ConfigManager) -> None:
        manager.config_dir.mkdir(parents=True)
        manager.config_path.write_text("api_url: [unclosed")
        with pytest.raises(ConfigError, match="Invalid config"):
            manager.load()

    def test_missing_user_id(self, manager: ConfigManager) -> None:
        manager.config_dir.mkdir(parents=True)
        manager.config_path.write_text(yaml.safe_dump({"api_url": "https://x"}))
        with pytest.raises(ConfigError, match="user_id"):
            manager.load()

    def test_invalid_role(self, manager: ConfigManager) -> None:
        manager.config_dir.mkdir(parents=True)
        manager.config_path.write_text(yaml.safe_dump({"api_url": "https://x", "user_id": "a", "role": "root"}))
        with pytest.raises(ConfigError, match="role"):
            manager.load()

    def test_env_overrides(self, manager: ConfigManager, monkeypatch) -> None:
        manager.save("https://api.test/api", "alice", Scope.STUDENT, "file-token")
        monkeypatch.setenv("DMRELAY_API_URL", "https://staging.test/api")
        monkeypatch.setenv("DMRELAY_TOKEN", "env-token")
        monkeypatch.setenv("DMRELAY_TIMEOUT", "2.5")
        monkeypatch.setenv("DMRELAY_HTTP2", "no")
        config = manager.load()
        assert config.api_url == "https://staging.test/api"
        assert config.token == "env-token"
        assert config.timeout == 2.5
        assert config.http2 is False

    def test_save_send_order(self, manager: ConfigManager) -> None:
        manager.save("https://api.test/api", "alice", Scope.STUDENT, "tok")
        manager.save_send_order(["basic", "standard"])
        config = manager.load()
        assert config.send_order == ("basic", "standard")
        assert config.token == "tok"
        assert build_catalog(config).names(Operation.SEND)[:2] == ["basic", "standard"]


class TestParsers:
    def test_parse_bool(self) -> None:
        assert _parse_bool("YES", False) is True
        assert _parse_bool("0", True) is False
        assert _parse_bool("", True) is True

    def test_parse_bool_unrecognised_logs_warning(self, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            assert _parse_bool("maybe", True) is True
        assert "Unrecognised boolean" in caplog.text

    def test_parse_timeout(self) -> None:
        assert _parse_timeout("3", 15.0) == 3.0
        assert _parse_timeout("abc", 15.0) == 15.0
        assert _parse_timeout("-1", 15.0) == 15.0
        assert _parse_timeout("", 15.0) == 15.0
