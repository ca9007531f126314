"""sourced configuration: Pydantic model and load."""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from sourced.core.constants import (
    ACTIVE_WORKDIR_NAME,
    CONFIG_FILENAME,
    CONTAINER_PREFIX,
    DEFAULT_BATCH_SERVICES,
    DEFAULT_COMPOSE_COMMAND,
    DEFAULT_WEB_TIMEOUT_SECONDS,
    POLL_INTERVAL_SECONDS,
    PROBE_TIMEOUT_SECONDS,
    SOURCED_DIR_NAME,
    SPINNER_THRESHOLD_SECONDS,
    UI_CONTAINER_NAME,
    UI_INTERNAL_PORT,
    WORKDIRS_DIR_NAME,
)
from sourced.core.exceptions import ConfigError, ConfigNotFoundError


def sourced_dir() -> Path:
    """Return the sourced directory (~/.sourced). Not created here."""
    return Path.home() / SOURCED_DIR_NAME


def default_workdir() -> Path:
    return sourced_dir() / WORKDIRS_DIR_NAME / ACTIVE_WORKDIR_NAME


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------


class ComposeConfig(BaseModel):
    command: list[str] = Field(default_factory=lambda: list(DEFAULT_COMPOSE_COMMAND), min_length=1)
    workdir: str = ""  # empty → ~/.sourced/workdirs/__active__

    @field_validator("command", mode="before")
    @classmethod
    def parse_command(cls, v: Any) -> Any:
        """Accept both list and a shell-style string."""
        if isinstance(v, str):
            return shlex.split(v)
        return v

    @property
    def workdir_path(self) -> Path:
        if self.workdir:
            return Path(self.workdir).expanduser()
        return default_workdir()


class WebConfig(BaseModel):
    container_name: str = UI_CONTAINER_NAME
    internal_port: int = Field(default=UI_INTERNAL_PORT, ge=1, le=65535)
    timeout_seconds: float = Field(default=DEFAULT_WEB_TIMEOUT_SECONDS, gt=0)
    poll_interval_seconds: float = Field(default=POLL_INTERVAL_SECONDS, gt=0)
    probe_timeout_seconds: float = Field(default=PROBE_TIMEOUT_SECONDS, gt=0)
    spinner_threshold_seconds: float = SPINNER_THRESHOLD_SECONDS
    container_prefix: str = CONTAINER_PREFIX
    batch_services: list[str] = Field(default_factory=lambda: list(DEFAULT_BATCH_SERVICES))

    @field_validator("batch_services", mode="before")
    @classmethod
    def parse_batch_services(cls, v: Any) -> Any:
        """Accept both list and comma-separated string."""
        if isinstance(v, str):
            return [name.strip() for name in v.split(",") if name.strip()]
        return v


class LoggingConfig(BaseModel):
    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class SourcedConfig(BaseModel):
    """Root sourced configuration model."""

    compose: ComposeConfig = Field(default_factory=ComposeConfig)
    web: WebConfig = Field(default_factory=WebConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------


def _config_file_path() -> tuple[Path, bool]:
    """Return the config path and whether the user asked for it explicitly."""
    if env_path := os.environ.get("SOURCED_CONFIG"):
        return Path(env_path), True
    return sourced_dir() / CONFIG_FILENAME, False


def load_config(path: Path | None = None) -> SourcedConfig:
    """
    Load SourcedConfig from TOML file, overlaid with environment variables.

    Priority (highest to lowest):
      1. Environment variables (SOURCED_*)
      2. Config file (~/.sourced/config.toml)
      3. Built-in defaults

    The default config file is optional; a path given explicitly (argument or
    SOURCED_CONFIG) must exist.
    """
    import tomllib

    if path is not None:
        cfg_path, explicit = path, True
    else:
        cfg_path, explicit = _config_file_path()

    data: dict[str, Any] = {}
    if cfg_path.exists():
        try:
            with open(cfg_path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigError(f"Cannot read config file {cfg_path}: {exc}") from exc
    elif explicit:
        raise ConfigNotFoundError(f"Config file not found: {cfg_path}")

    _apply_env_overrides(data)

    try:
        return SourcedConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid config at {cfg_path}: {exc}") from exc


def _apply_env_overrides(data: dict[str, Any]) -> None:
    """Overlay SOURCED_* environment variables onto the parsed TOML data."""
    if workdir := os.environ.get("SOURCED_WORKDIR"):
        data.setdefault("compose", {})["workdir"] = workdir
    if command := os.environ.get("SOURCED_COMPOSE_COMMAND"):
        data.setdefault("compose", {})["command"] = command
    if level := os.environ.get("SOURCED_LOG_LEVEL"):
        data.setdefault("logging", {})["level"] = level
    if timeout := os.environ.get("SOURCED_WEB_TIMEOUT"):
        data.setdefault("web", {})["timeout_seconds"] = timeout
    if services := os.environ.get("SOURCED_BATCH_SERVICES"):
        data.setdefault("web", {})["batch_services"] = services
