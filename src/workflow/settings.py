from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'sqlite'
    - SQLITE_DB_PATH: path to the sqlite key-value file. Default './data/workflow.db'
    - REMOTE_BACKEND: 'drive' (default, Google Drive) or 'memory'
    - REMOTE_FILE_NAME: name of the backup file in the drive. Default 'workflow_data.json'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - ENABLE_BASIC_AUTH: 'true' to enable optional HTTP Basic Auth (default: false)
    - BASIC_AUTH_USERNAME / BASIC_AUTH_PASSWORD: credentials when basic auth is enabled
    - AUTOSAVE_DEBOUNCE_SECONDS: quiet period before an auto-save fires (default: 5)
    - SYNC_SUCCESS_DISPLAY_SECONDS: how long 'success' is shown before 'idle' (default: 3)
    - STATUS_MESSAGE_SECONDS: lifetime of transient user messages (default: 5)
    - GEMINI_API_KEY: API key for the AI assistant; AI operations degrade when unset
    - GEMINI_MODEL: model name (default: 'gemini-2.5-flash')
    - AI_TIMEOUT_SECONDS: timeout of a single AI request (default: 60)
    - LOG_LEVEL: root log level (default: 'INFO')
    """

    persistence_backend: str
    sqlite_db_path: str
    remote_backend: str
    remote_file_name: str
    cors_allow_origins: List[str]
    enable_basic_auth: bool
    basic_auth_username: Optional[str]
    basic_auth_password: Optional[str]
    autosave_debounce_seconds: float
    sync_success_display_seconds: float
    status_message_seconds: float
    gemini_api_key: Optional[str]
    gemini_model: str
    ai_timeout_seconds: float
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_seconds(value: str, default: float) -> float:
    try:
        seconds = float(value)
    except ValueError:
        return default
    return seconds if seconds >= 0 else default


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


def _choice(value: str, allowed: set, default: str) -> str:
    v = value.strip().lower()
    return v if v in allowed else default


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    enable_basic_auth = _parse_bool(_get_env("ENABLE_BASIC_AUTH", "false"), False)

    return Settings(
        persistence_backend=_choice(_get_env("PERSISTENCE_BACKEND", "memory"), {"memory", "sqlite"}, "memory"),
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/workflow.db").strip(),
        remote_backend=_choice(_get_env("REMOTE_BACKEND", "drive"), {"drive", "memory"}, "drive"),
        remote_file_name=_get_env("REMOTE_FILE_NAME", "workflow_data.json").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        enable_basic_auth=enable_basic_auth,
        basic_auth_username=os.getenv("BASIC_AUTH_USERNAME") if enable_basic_auth else None,
        basic_auth_password=os.getenv("BASIC_AUTH_PASSWORD") if enable_basic_auth else None,
        autosave_debounce_seconds=_parse_seconds(_get_env("AUTOSAVE_DEBOUNCE_SECONDS", "5"), 5.0),
        sync_success_display_seconds=_parse_seconds(_get_env("SYNC_SUCCESS_DISPLAY_SECONDS", "3"), 3.0),
        status_message_seconds=_parse_seconds(_get_env("STATUS_MESSAGE_SECONDS", "5"), 5.0),
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=_get_env("GEMINI_MODEL", "gemini-2.5-flash").strip(),
        ai_timeout_seconds=_parse_seconds(_get_env("AI_TIMEOUT_SECONDS", "60"), 60.0),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
