# src/prioritizze/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole service.
- No secrets required at import time.
- Malformed values fall back to defaults instead of failing startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "PRIORITIZZE"

DEFAULT_API_BASE_URL = "http://127.0.0.1:8000/"
DEFAULT_RESET_INTERVAL_SECONDS = 60 * 60


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_optional(name: str) -> Optional[str]:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return None
    return v.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Backend API ----
    api_base_url: str
    api_token: Optional[str]
    api_email: Optional[str]
    api_password: Optional[str]
    http_connect_timeout_seconds: float
    http_read_timeout_seconds: float

    # ---- Recurring reset ----
    reset_interval_seconds: int
    timezone: Optional[str]

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "prioritizze").strip() or "prioritizze"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/prioritizze"))

        api_base_url = _env(_k("API_BASE_URL"), DEFAULT_API_BASE_URL).strip() or DEFAULT_API_BASE_URL

        connect_timeout = _env_float(_k("HTTP_CONNECT_TIMEOUT_SECONDS"), 5.0)
        read_timeout = _env_float(_k("HTTP_READ_TIMEOUT_SECONDS"), 20.0)

        interval = _env_int(_k("RESET_INTERVAL_SECONDS"), DEFAULT_RESET_INTERVAL_SECONDS)
        if interval <= 0:
            interval = DEFAULT_RESET_INTERVAL_SECONDS

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            api_base_url=api_base_url,
            api_token=_env_optional(_k("API_TOKEN")),
            api_email=_env_optional(_k("API_EMAIL")),
            api_password=_env_optional(_k("API_PASSWORD")),
            http_connect_timeout_seconds=max(0.1, connect_timeout),
            http_read_timeout_seconds=max(0.1, read_timeout),
            reset_interval_seconds=interval,
            timezone=_env_optional(_k("TIMEZONE")),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Process settings, read from the environment on first use."""
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
