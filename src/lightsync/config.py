"""Configuration loading for lightsync."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

MIN_POLL_INTERVAL_MS = 500
DEFAULT_POLL_INTERVAL_MS = 1000
DEFAULT_SETTLE_MARGIN = 2.0
DEFAULT_DEVICE_TIMEOUT = 10.0


class ServerConfig(BaseModel):
    """Light server configuration.

    ``name``, ``address`` and ``broadcast`` identify the LAN client for the
    transport that discovers lights and creates device handles. lightsync
    itself only reads ``lights``, ``interval``, ``settle_margin`` and
    ``device_timeout``.
    """

    name: str = "lightsync"
    address: str | None = None
    broadcast: str | None = None
    lights: list[str] = Field(default_factory=list)
    interval: int = DEFAULT_POLL_INTERVAL_MS  # poll interval, ms
    settle_margin: float = Field(default=DEFAULT_SETTLE_MARGIN, ge=0)  # seconds
    device_timeout: float = Field(default=DEFAULT_DEVICE_TIMEOUT, gt=0)  # seconds

    @field_validator("lights", mode="before")
    @classmethod
    def split_lights(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("interval", mode="before")
    @classmethod
    def floor_interval(cls, value: Any) -> int:
        # Bounds network load; unparseable values fall back to the minimum
        try:
            interval = int(value)
        except (TypeError, ValueError):
            return MIN_POLL_INTERVAL_MS
        return max(MIN_POLL_INTERVAL_MS, interval)

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.interval / 1000.0


class LightsyncConfig(BaseModel):
    """Main configuration model."""

    server: ServerConfig = Field(default_factory=ServerConfig)


def find_config_dir() -> Path:
    """Find the config directory.

    Looks for config directory in the following order:
    1. ./config (relative to cwd)
    2. ../config (parent of cwd)
    3. ~/.config/lightsync
    """
    cwd = Path.cwd()

    if (cwd / "config").is_dir():
        return cwd / "config"

    if (cwd.parent / "config").is_dir():
        return cwd.parent / "config"

    home_config = Path.home() / ".config" / "lightsync"
    if home_config.is_dir():
        return home_config

    return cwd / "config"


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if not found."""
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_config(config_dir: Path | None = None) -> LightsyncConfig:
    """Load the main configuration."""
    if config_dir is None:
        config_dir = find_config_dir()

    config_path = config_dir / "config.yaml"
    data = load_yaml(config_path)
    return LightsyncConfig.model_validate(data)
