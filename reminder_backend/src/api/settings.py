from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - REMINDERS_FILE: path to the JSON file holding all reminders. Default './output.json'
    - NOTIFY_BACKEND: 'desktop' (default, native notifications) or 'log'
    - NOTIFY_APP_NAME: application name shown on notifications
    - NOTIFY_ICON: path to an icon file for notifications (empty for none)
    - NOTIFY_TIMEOUT_SECONDS: how long a notification stays visible. Default 6
    - NOTIFY_POLL_SECONDS: seconds between due checks; 0 disables polling. Default 1
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: logging level name. Default 'INFO'
    """

    reminders_file: str
    notify_backend: str
    notify_app_name: str
    notify_icon: str
    notify_timeout_seconds: int
    notify_poll_seconds: float
    cors_allow_origins: List[str]
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_float(value: str, default: float) -> float:
    try:
        return float(value.strip())
    except ValueError:
        return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("NOTIFY_BACKEND", "desktop").strip().lower()
    if backend not in {"desktop", "log"}:
        # Fallback to desktop if unsupported
        backend = "desktop"

    timeout = max(_parse_int(_get_env("NOTIFY_TIMEOUT_SECONDS", "6"), 6), 1)
    poll = max(_parse_float(_get_env("NOTIFY_POLL_SECONDS", "1"), 1.0), 0.0)

    level = _get_env("LOG_LEVEL", "INFO").strip().upper()
    if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        level = "INFO"

    return Settings(
        reminders_file=_get_env("REMINDERS_FILE", "./output.json").strip(),
        notify_backend=backend,
        notify_app_name=_get_env("NOTIFY_APP_NAME", "Reminder App"),
        notify_icon=os.getenv("NOTIFY_ICON", "").strip(),
        notify_timeout_seconds=timeout,
        notify_poll_seconds=poll,
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=level,
    )
