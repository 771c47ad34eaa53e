"""
Configuration for pathmutex. Read from YAML, then overridden from the environment.
"""
from pathlib import Path
import logging
import os
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from pathmutex.core import paths
from pathmutex.core.errors import ConfigError

SETTINGS_FILE = "config.yaml"
CONFIG_ENV = "PATHMUTEX_CONFIG"
ENV_OVERRIDES = {
    "PATHMUTEX_POLL_INTERVAL": "poll_interval",
    "PATHMUTEX_TIMEOUT": "timeout",
    "PATHMUTEX_STRATEGY": "strategy",
    "PATHMUTEX_LOCK_DIR": "lock_dir",
}

logger = logging.getLogger("pathmutex.settings")


class LockSettings(BaseModel):
    """
    Defaults applied to locks created through the CLI or Runtime.
    """
    poll_interval: float = Field(0.1, gt=0, description="Seconds between acquisition attempts")
    timeout: float = Field(10.0, ge=0, description="Seconds to wait for a lock before giving up")
    strategy: Literal["file", "directory"] = Field("file", description="Lock resource type")
    mode: int | None = Field(None, ge=0, le=0o777,
                             description="Permission bits of the lock resource (strategy default if unset)")
    release_order: Literal["unlink-then-close", "close-then-unlink"] | None = Field(
        None, description="Override the platform's release ordering (file strategy only)"
    )
    lock_dir: Path | None = Field(None, description="Directory for locks given by bare name")

    @field_validator('mode', mode='before')
    @classmethod
    def parse_octal(cls, value):
        """Allow modes written as octal strings, e.g. '0600' or '0o600'."""
        if isinstance(value, str):
            try:
                return int(value, 8)
            except ValueError as e:
                raise ValueError(f"mode must be an octal string, got {value!r}") from e
        return value

    @field_validator('lock_dir', mode='after')
    @classmethod
    def expand_lock_dir(cls, value: Path | None) -> Path | None:
        """Expand '~' in lock_dir."""
        return value.expanduser() if value is not None else None

    def to_dict(self) -> dict[str, Any]:
        """Serialize settings for YAML output (mode rendered in octal)."""
        data = self.model_dump(mode="json")
        if self.mode is not None:
            data["mode"] = f"{self.mode:04o}"
        return data


def config_path_for(config_path: Path | None = None) -> Path:
    """Which configuration file would be read: argument, then env var, then default."""
    if config_path is not None:
        return Path(config_path).expanduser()
    if env := os.getenv(CONFIG_ENV):
        return Path(env).expanduser()
    return paths.default_settings_dir() / SETTINGS_FILE


def load_settings(config_path: Path | None = None) -> LockSettings:
    """
    Load settings from YAML. A missing file gives the defaults; a broken or
    invalid one raises ConfigError. Environment overrides are applied last.
    """
    path = config_path_for(config_path)
    data: dict[str, Any] = {}
    if path.exists():
        logger.debug("Loading settings from %s", path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read config {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")

    for env_key, field_name in ENV_OVERRIDES.items():
        if (value := os.getenv(env_key)) is not None:
            data[field_name] = value

    try:
        return LockSettings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {path}: {e}") from e


def save_settings(path: Path, settings: LockSettings) -> Path:
    """Save settings to the YAML file at `path`, creating its directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(settings.to_dict(), f, sort_keys=False)
    return path
