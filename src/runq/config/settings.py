"""
config/settings.py — runq Runtime Settings

Merges runq.yaml (defaults/structure) with RUNQ_* environment variables and
an optional .env file. Pydantic-powered — all fields are validated and typed.

  - concurrency must be >= 1 (zero or negative capacity is rejected at parse time)
  - logging.level must be a known stdlib level name
  - load_settings() respects RUNQ_CONFIG as a fallback when no explicit
    config_path argument is given
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from runq.exceptions import ConfigError
from runq.types import DEFAULT_CONCURRENCY

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

_DEFAULT_CONFIG_PATH = Path("runq.yaml")


# ─────────────────────────────────────────────────────────────────────────────
# Sub-models
# ─────────────────────────────────────────────────────────────────────────────

class LoggingConfig(BaseModel):
    level: str = "INFO"
    log_dir: Optional[str] = None
    max_file_size_mb: int = 100
    backup_count: int = 5
    console_output: bool = True
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def _valid_log_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"logging.level '{v}' is not valid. "
                f"Must be one of: {sorted(_VALID_LOG_LEVELS)}"
            )
        return upper

    @field_validator("max_file_size_mb", "backup_count")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("logging file rotation values must be >= 0")
        return v


# ─────────────────────────────────────────────────────────────────────────────
# Root Settings
# ─────────────────────────────────────────────────────────────────────────────

class RunQSettings(BaseSettings):
    """
    runq runtime settings.

    Priority (highest to lowest):
      1. Environment variables (RUNQ_CONCURRENCY, RUNQ_DEBUG, RUNQ_LOGGING__LEVEL, ...)
      2. .env file
      3. runq.yaml / constructor keywords
      4. Field defaults
    """

    model_config = SettingsConfigDict(
        env_prefix="RUNQ_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    concurrency: int = DEFAULT_CONCURRENCY
    debug: bool = False
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @field_validator("concurrency")
    @classmethod
    def _positive_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("concurrency must be >= 1")
        return v

    @field_validator("logging", mode="before")
    @classmethod
    def _coerce_logging(cls, v: Any) -> Any:
        return LoggingConfig(**v) if isinstance(v, dict) else v

    # -- Convenience properties ----------------------------------------------

    @property
    def log_level(self) -> str:
        return self.logging.level

    @property
    def log_dir(self) -> Optional[Path]:
        return Path(self.logging.log_dir) if self.logging.log_dir else None


# ─────────────────────────────────────────────────────────────────────────────
# Loader + singleton
# ─────────────────────────────────────────────────────────────────────────────

_KNOWN_KEYS = {"concurrency", "debug", "logging"}

_singleton: Optional[RunQSettings] = None
_singleton_lock = threading.RLock()


def _load_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Could not read settings file '{path}': {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Settings file '{path}' must contain a mapping at the top level, "
            f"got {type(data).__name__}."
        )
    return data


def _resolve_config_path(config_path: str | Path | None) -> Path:
    """
    Resolve the config file path with this priority:
      1. Explicit config_path argument
      2. RUNQ_CONFIG environment variable
      3. Default: ./runq.yaml
    """
    if config_path is not None:
        return Path(config_path)
    env_path = os.environ.get("RUNQ_CONFIG")
    if env_path:
        return Path(env_path)
    return _DEFAULT_CONFIG_PATH


def load_settings(config_path: str | Path | None = None) -> RunQSettings:
    """Load settings by merging the YAML file with environment variables."""
    global _singleton
    yaml_data = _load_yaml(_resolve_config_path(config_path))
    init_kwargs = {k: v for k, v in yaml_data.items() if k in _KNOWN_KEYS}

    instance = RunQSettings(**init_kwargs)
    with _singleton_lock:
        _singleton = instance
    return instance


def get_settings() -> RunQSettings:
    """
    Return the global RunQSettings singleton, loading it from the default
    config path on first use.
    """
    if _singleton is not None:
        return _singleton  # fast path, no lock once set
    with _singleton_lock:
        # Re-check and load under the lock so only one thread builds it
        if _singleton is not None:
            return _singleton
        return load_settings()


def reset_settings() -> None:
    """Drop the cached singleton so the next get_settings() reloads."""
    global _singleton
    with _singleton_lock:
        _singleton = None
