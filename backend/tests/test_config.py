"""Tests for settings loading."""
import pytest
from pydantic import ValidationError

from smartgate.config import AppSettings, get_config, load_settings, reset_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("PORT", "MAX_IDLE_MS", "LOG_LEVEL", "SMARTGATE_SETTINGS"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


class TestDefaults:
    def test_defaults(self):
        cfg = AppSettings()
        assert cfg.server.port == 8080
        assert cfg.server.allowed_origins == ["*"]
        assert cfg.relay.max_message_bytes == 128 * 1024
        assert cfg.relay.per_message_deflate is False
        assert cfg.relay.heartbeat_interval_seconds == 30
        assert cfg.relay.send_timeout_seconds == 10
        assert cfg.rooms.max_idle_seconds == 24 * 60 * 60
        assert cfg.rooms.sweep_interval_seconds == 600
        assert cfg.rooms.id_attempts == 5

    def test_missing_file_gives_defaults(self, tmp_path):
        cfg = load_settings(tmp_path / "absent.yaml")
        assert cfg == AppSettings()


class TestYamlFile:
    def test_values_from_file(self, tmp_path):
        path = tmp_path / "smartgate.settings.yaml"
        path.write_text(
            "server:\n  port: 9000\n"
            "rooms:\n  max_idle_seconds: 60\n"
            "logging:\n  level: debug\n"
        )
        cfg = load_settings(path)
        assert cfg.server.port == 9000
        assert cfg.rooms.max_idle_seconds == 60
        assert cfg.logging.level == "debug"
        assert cfg.relay.heartbeat_interval_seconds == 30

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_settings(path) == AppSettings()

    def test_rejects_non_positive_interval(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("relay:\n  heartbeat_interval_seconds: 0\n")
        with pytest.raises(ValidationError):
            load_settings(path)

    def test_settings_path_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("server:\n  port: 7000\n")
        monkeypatch.setenv("SMARTGATE_SETTINGS", str(path))
        assert load_settings().server.port == 7000


class TestEnvOverrides:
    def test_port_and_idle(self, tmp_path, monkeypatch):
        path = tmp_path / "s.yaml"
        path.write_text("server:\n  port: 9000\n")
        monkeypatch.setenv("PORT", "8181")
        monkeypatch.setenv("MAX_IDLE_MS", "90000")
        monkeypatch.setenv("LOG_LEVEL", "warning")
        cfg = load_settings(path)
        assert cfg.server.port == 8181
        assert cfg.rooms.max_idle_seconds == 90.0
        assert cfg.logging.level == "warning"


class TestGetConfig:
    def test_is_cached(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SMARTGATE_SETTINGS", str(tmp_path / "absent.yaml"))
        assert get_config() is get_config()

    def test_reset_reloads(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SMARTGATE_SETTINGS", str(tmp_path / "absent.yaml"))
        first = get_config()
        reset_config()
        assert get_config() is not first
