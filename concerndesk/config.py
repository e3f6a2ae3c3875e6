"""Application configuration loaded from config.yaml + environment variables."""

from __future__ import annotations

import yaml
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml() -> dict:
    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH) as f:
            return yaml.safe_load(f) or {}
    return {}


_yaml = _load_yaml()


class PollerConfig(BaseSettings):
    owner_interval_seconds: float = 10.0
    admin_interval_seconds: float = 10.0
    unread_interval_seconds: float = 60.0


class RetryConfig(BaseSettings):
    max_attempts: int = 3
    base_delay_seconds: float = 1.0
    request_timeout_seconds: float = 15.0


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///data/concerndesk.db"
    api_url: str = "http://127.0.0.1:8000"
    log_level: str = "INFO"
    session_max_age_days: int = 7
    poller: PollerConfig = Field(default_factory=PollerConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "CONCERNDESK_"}


def get_settings() -> Settings:
    """Build Settings by merging YAML defaults with env overrides."""
    y = _yaml
    poller = PollerConfig(**y.get("poller", {}))
    retry = RetryConfig(**y.get("retry", {}))
    overrides = {}
    db_url = y.get("database", {}).get("url")
    if db_url:
        overrides["database_url"] = db_url
    for key in ("api_url", "log_level", "session_max_age_days"):
        if key in y:
            overrides[key] = y[key]
    return Settings(poller=poller, retry=retry, **overrides)
