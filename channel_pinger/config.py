"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

from apscheduler.triggers.cron import CronTrigger
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from .constants import (
    COMMAND_SETTLE_MS,
    COMMAND_TOKEN,
    DEFAULT_CRON_SCHEDULE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_PORT,
    DEFAULT_TARGET_URL,
    KEY_DELAY_MS,
    LOCATE_TIMEOUT_MS,
    LOGIN_SETTLE_MS,
    NAVIGATION_TIMEOUT_MS,
)

load_dotenv()


class ConfigError(ValueError):
    """Raised when the environment does not describe a usable configuration."""


class Settings(BaseModel):
    """Immutable process configuration, loaded once at start."""

    model_config = ConfigDict(frozen=True)

    # Target and credentials
    target_url: str = DEFAULT_TARGET_URL
    email: str
    password: SecretStr

    # Liveness server
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT

    # Scheduling
    cron_schedule: str = DEFAULT_CRON_SCHEDULE
    run_on_start: bool = False

    # Browser
    headless: bool = True
    profile_dir: Optional[Path] = None
    navigation_timeout_ms: int = Field(default=NAVIGATION_TIMEOUT_MS, ge=0)
    locate_timeout_ms: int = Field(default=LOCATE_TIMEOUT_MS, ge=0)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=1)

    # Message command and settle delays
    command_token: str = COMMAND_TOKEN
    login_settle_ms: int = Field(default=LOGIN_SETTLE_MS, ge=0)
    key_delay_ms: int = Field(default=KEY_DELAY_MS, ge=0)
    command_settle_ms: int = Field(default=COMMAND_SETTLE_MS, ge=0)

    @field_validator("email", "command_token")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("password")
    @classmethod
    def _secret_not_blank(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("must not be empty")
        return value

    @field_validator("cron_schedule")
    @classmethod
    def _valid_crontab(cls, value: str) -> str:
        CronTrigger.from_crontab(value)
        return value


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment.

    Raises:
        ConfigError: credentials are missing or a value does not validate.
    """
    env = os.environ if env is None else env

    missing = [name for name in ("EMAIL", "PASSWORD") if not env.get(name)]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    values: dict = {
        "email": env["EMAIL"],
        "password": env["PASSWORD"],
    }
    optional = {
        "TARGET_URL": "target_url",
        "HOST": "host",
        "PORT": "port",
        "CRON_SCHEDULE": "cron_schedule",
        "MAX_RETRIES": "max_retries",
        "NAVIGATION_TIMEOUT_MS": "navigation_timeout_ms",
        "LOCATE_TIMEOUT_MS": "locate_timeout_ms",
        "BROWSER_PROFILE_DIR": "profile_dir",
        "COMMAND_TOKEN": "command_token",
    }
    for var, field in optional.items():
        if env.get(var):
            values[field] = env[var]
    if env.get("BROWSER_HEADLESS"):
        values["headless"] = _env_bool(env["BROWSER_HEADLESS"])
    if env.get("RUN_ON_START"):
        values["run_on_start"] = _env_bool(env["RUN_ON_START"])

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
