"""Smart Gate relay configuration.

Loads settings from a single YAML file:
  * smartgate.settings.yaml : non-secret configuration (optional)

The file location can be overridden with ``SMARTGATE_SETTINGS``.  A handful
of environment variables take precedence over the file:

  * PORT        : HTTP/WebSocket listen port
  * MAX_IDLE_MS : idle threshold for empty rooms, in milliseconds
  * LOG_LEVEL   : root logger level
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SETTINGS_FILE = Path("smartgate.settings.yaml")


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}
    with path.open(encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


# ---------------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------------


class ServerSettings(BaseModel):
    host:            str       = "0.0.0.0"
    port:            int       = 8080
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])


class RelaySettings(BaseModel):
    """WebSocket transport and liveness settings."""
    max_message_bytes:          int   = 128 * 1024
    per_message_deflate:        bool  = False
    heartbeat_interval_seconds: float = 30.0
    send_timeout_seconds:       float = 10.0

    @field_validator("max_message_bytes", "heartbeat_interval_seconds", "send_timeout_seconds")
    @classmethod
    def _positive(cls, value):
        if value <= 0:
            raise ValueError("must be positive")
        return value


class RoomSettings(BaseModel):
    """Room lifetime and identifier generation settings."""
    max_idle_seconds:       float = 24 * 60 * 60
    sweep_interval_seconds: float = 10 * 60
    id_attempts:            int   = 5

    @field_validator("max_idle_seconds", "sweep_interval_seconds", "id_attempts")
    @classmethod
    def _positive(cls, value):
        if value <= 0:
            raise ValueError("must be positive")
        return value


class LoggingSettings(BaseModel):
    level: str = "info"


class AppSettings(BaseModel):
    server:  ServerSettings  = Field(default_factory=ServerSettings)
    relay:   RelaySettings   = Field(default_factory=RelaySettings)
    rooms:   RoomSettings    = Field(default_factory=RoomSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# ---------------------------------------------------------------------------
# Environment overrides
# ---------------------------------------------------------------------------


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay PORT / MAX_IDLE_MS / LOG_LEVEL onto raw settings data."""
    port = os.environ.get("PORT")
    if port:
        data.setdefault("server", {})["port"] = int(port)

    max_idle_ms = os.environ.get("MAX_IDLE_MS")
    if max_idle_ms:
        data.setdefault("rooms", {})["max_idle_seconds"] = int(max_idle_ms) / 1000.0

    log_level = os.environ.get("LOG_LEVEL")
    if log_level:
        data.setdefault("logging", {})["level"] = log_level

    return data


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_settings(path: Optional[Path] = None) -> AppSettings:
    """Load the settings file, apply env overrides and validate."""
    if path is None:
        path = Path(os.environ.get("SMARTGATE_SETTINGS", SETTINGS_FILE))

    settings_data = _apply_env_overrides(_load_yaml(path))

    app_settings = AppSettings(**settings_data)
    logger.info(
        "Settings loaded (server=%s:%s, max_idle=%ss, heartbeat=%ss)",
        app_settings.server.host,
        app_settings.server.port,
        app_settings.rooms.max_idle_seconds,
        app_settings.relay.heartbeat_interval_seconds,
    )
    return app_settings


_config: Optional[AppSettings] = None


def get_config() -> AppSettings:
    """Return the process-wide settings, loading them on first use."""
    global _config
    if _config is None:
        _config = load_settings()
    return _config


def reset_config() -> None:
    """Drop the cached settings so the next get_config() reloads them."""
    global _config
    _config = None
