# Area: Shared Tests
"""Tests for AutoHostConfig and load_config()."""

import json
import logging

import pytest
from pydantic import ValidationError

from spring_autohost.config import ENV_MAPPINGS, AutoHostConfig, load_config
from spring_autohost.errors import ConfigError


@pytest.fixture
def clean_env(monkeypatch):
    """Start without AUTOHOST_* variables and remove any a .env file sets."""
    for key in ENV_MAPPINGS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


@pytest.fixture
def no_env_file(tmp_path):
    return str(tmp_path / "missing.env")


class TestAutoHostConfig:
    """Tests for the config model."""

    def test_defaults(self):
        config = AutoHostConfig()
        assert config.auto_host_port == 8454
        assert config.host == "127.0.0.1"
        assert config.warn_for_unhandled_messages is True
        assert config.receive_buffer_size == 4096

    def test_is_frozen(self):
        config = AutoHostConfig()
        with pytest.raises(ValidationError):
            config.auto_host_port = 1

    def test_unknown_key_is_ignored_and_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="spring_autohost.config"):
            config = AutoHostConfig.from_mapping({"auto_host_port": 8452, "colour": "red"})
        assert config.auto_host_port == 8452
        assert "Ignoring invalid configuration parameter (colour)" in caplog.text

    @pytest.mark.parametrize("port", [0, 65536, "not-a-port"])
    def test_invalid_port_rejected(self, port):
        with pytest.raises(ConfigError) as exc_info:
            AutoHostConfig.from_mapping({"auto_host_port": port})
        assert exc_info.value.validation_errors
        assert "auto_host_port" in exc_info.value.validation_errors[0]

    @pytest.mark.parametrize("host", ["127.0.0.1", "127.0.0.2", "localhost"])
    def test_loopback_hosts_accepted(self, host):
        assert AutoHostConfig(host=host).host == host

    @pytest.mark.parametrize("host", ["0.0.0.0", "192.168.1.10", "::1", "example.org"])
    def test_non_loopback_host_rejected(self, host):
        with pytest.raises(ConfigError) as exc_info:
            AutoHostConfig.from_mapping({"host": host})
        assert "loopback" in exc_info.value.validation_errors[0]

    def test_with_overrides_returns_new_config(self):
        base = AutoHostConfig()
        changed = base.with_overrides(auto_host_port=8452)
        assert changed.auto_host_port == 8452
        assert base.auto_host_port == 8454

    def test_with_overrides_validates(self):
        with pytest.raises(ConfigError):
            AutoHostConfig().with_overrides(receive_buffer_size=0)


class TestLoadConfig:
    """Tests for load_config()."""

    def test_defaults_without_sources(self, clean_env, no_env_file):
        assert load_config(env_file=no_env_file) == AutoHostConfig()

    def test_json_file(self, clean_env, no_env_file, tmp_path):
        path = tmp_path / "autohost.json"
        path.write_text(json.dumps({"auto_host_port": 8452, "warn_for_unhandled_messages": False}))
        config = load_config(str(path), env_file=no_env_file)
        assert config.auto_host_port == 8452
        assert config.warn_for_unhandled_messages is False

    def test_environment_overrides_file(self, clean_env, no_env_file, tmp_path):
        path = tmp_path / "autohost.json"
        path.write_text(json.dumps({"auto_host_port": 8452}))
        clean_env.setenv("AUTOHOST_PORT", "8460")
        clean_env.setenv("AUTOHOST_WARN_UNHANDLED", "false")
        config = load_config(str(path), env_file=no_env_file)
        assert config.auto_host_port == 8460
        assert config.warn_for_unhandled_messages is False

    def test_dotenv_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("AUTOHOST_PORT=8470\nAUTOHOST_RECV_BUFFER=1024\n")
        config = load_config(env_file=str(env_file))
        assert config.auto_host_port == 8470
        assert config.receive_buffer_size == 1024

    def test_missing_file(self, clean_env, no_env_file, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(str(tmp_path / "nope.json"), env_file=no_env_file)

    def test_invalid_json(self, clean_env, no_env_file, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config(str(path), env_file=no_env_file)

    def test_json_must_be_object(self, clean_env, no_env_file, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError, match="JSON object"):
            load_config(str(path), env_file=no_env_file)

    def test_environment_cannot_expose_port(self, clean_env, no_env_file):
        clean_env.setenv("AUTOHOST_HOST", "0.0.0.0")
        with pytest.raises(ConfigError):
            load_config(env_file=no_env_file)

    def test_invalid_environment_value(self, clean_env, no_env_file):
        clean_env.setenv("AUTOHOST_PORT", "99999")
        with pytest.raises(ConfigError):
            load_config(env_file=no_env_file)
