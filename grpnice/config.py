"""Configuration loading and validation using Pydantic models."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .autogroup import DEFAULT_ADJUSTMENT, DEFAULT_PROC_ROOT
from .errors import ConfigError

CONFIG_ENV = "GRPNICE_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/grpnice/config.yml")

_ENV_FIELDS = {
    "GRPNICE_PROC_ROOT": "proc_root",
    "GRPNICE_DEFAULT_ADJUSTMENT": "default_adjustment",
    "GRPNICE_WRITE_FORMAT": "write_format",
    "GRPNICE_LOG_LEVEL": "log_level",
    "GRPNICE_LOG_DIR": "log_dir",
}

_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class GrpniceConfig(BaseModel):
    proc_root: Path = Field(
        DEFAULT_PROC_ROOT,
        description="Mount point of procfs; autogroups live at <proc_root>/<pid>/autogroup.",
    )
    default_adjustment: int = Field(
        DEFAULT_ADJUSTMENT,
        description="Adjustment applied when -n is not given.",
    )
    write_format: Literal["record", "value"] = Field(
        "record",
        description="Write back the whole record, or only the niceness value.",
    )
    log_level: str = Field("WARNING")
    log_dir: Optional[Path] = Field(
        None,
        description="Directory for a rotating log file; stderr only when unset.",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in _LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}")
        return normalized


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise ConfigError(f"cannot parse {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def load_config(
    path: Path | str | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> GrpniceConfig:
    """Load configuration from YAML, then apply environment and explicit overrides.

    An explicit ``path`` (or ``$GRPNICE_CONFIG``) must exist; the default path is
    optional.
    """

    env = os.environ if env is None else env
    explicit = path or env.get(CONFIG_ENV)
    config_path = Path(explicit or DEFAULT_CONFIG_PATH).expanduser()

    data: dict[str, Any] = {}
    try:
        data = _read_yaml(config_path)
    except FileNotFoundError:
        if explicit:
            raise ConfigError(f"config file not found: {config_path}") from None
    except OSError as exc:
        raise ConfigError(f"cannot read {config_path}: {exc}") from exc

    for key, field_name in _ENV_FIELDS.items():
        value = env.get(key)
        if value:
            data[field_name] = value
    data.update({key: value for key, value in (overrides or {}).items() if value is not None})

    try:
        return GrpniceConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc
