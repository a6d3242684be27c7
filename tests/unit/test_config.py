"""
Unit tests for server configuration.
"""

import dataclasses

import pytest

from tinyhttpd.config import ServerConfig


class TestServerConfig:
    """Tests for ServerConfig dataclass."""

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 4221
        assert config.directory == ""
        assert config.buffer_size == 1024
        config.validate()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("TINYHTTPD_PORT", "8080")
        monkeypatch.setenv("TINYHTTPD_DIRECTORY", "/tmp/files")
        monkeypatch.setenv("TINYHTTPD_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.port == 8080
        assert config.directory == "/tmp/files"
        assert config.log_level == "DEBUG"
        assert config.host == "0.0.0.0"

    def test_frozen(self):
        config = ServerConfig()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.directory = "/elsewhere"

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 70000},
        {"backlog": 0},
        {"buffer_size": 0},
        {"log_level": "LOUD"},
    ])
    def test_validate_rejects(self, overrides: dict):
        with pytest.raises(ValueError):
            ServerConfig(**overrides).validate()

    def test_port_zero_allowed(self):
        ServerConfig(port=0).validate()

    def test_log_level_case_insensitive(self):
        ServerConfig(log_level="debug").validate()
