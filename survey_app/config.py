"""Configuration utilities for the Survey Service.

Configuration is loaded with the following rules:
- Primary source: `service_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.

`load_config()` re-reads every source on each call so values such as the API
base URL can change without a restart.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_SERVICE_CONFIG = Path("service_config.json")
DEFAULT_DATABASE_URL = "sqlite+pysqlite:///./survey_app.db"
DEFAULT_CLIENT_URL = "http://localhost:5173"
LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


class DatabaseConfig(BaseModel):
    dsn: str

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v.strip()


class AuthConfig(BaseModel):
    # Empty or missing means "use the local default" (see logic.auth_url)
    api_base_url: Optional[str] = None


class ServerConfig(BaseModel):
    client_url: str = Field(default=DEFAULT_CLIENT_URL)
    auto_apply_migrations: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = str(v or "").strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"server.log_level must be one of {sorted(LOG_LEVELS)}")
        return level

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.client_url.split(",") if o.strip()]


class AppConfig(BaseModel):
    database: DatabaseConfig
    auth: AuthConfig
    server: ServerConfig


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            return data if isinstance(data, dict) else {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def _truthy(text: Optional[str]) -> bool:
    return str(text or "").strip().lower() in {"1", "true", "yes", "on"}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) service_config.json at project root
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_SERVICE_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    dsn = (
        _env("TEST_DATABASE_URL")
        or _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.dsn")
        or DEFAULT_DATABASE_URL
    )
    api_base_url = _env("API_BASE_URL") or _read_config_file("auth.api_base_url") or _base("auth.api_base_url")
    client_url = _env("CLIENT_URL") or _read_config_file("server.client_url") or _base("server.client_url", DEFAULT_CLIENT_URL)
    auto_migrate = _env("AUTO_APPLY_MIGRATIONS") or _read_config_file("server.auto_apply_migrations") or _base("server.auto_apply_migrations", "false")
    log_level = _env("LOG_LEVEL") or _read_config_file("server.log_level") or _base("server.log_level", "INFO")

    try:
        return AppConfig(
            database=DatabaseConfig(dsn=dsn),
            auth=AuthConfig(api_base_url=api_base_url or None),
            server=ServerConfig(
                client_url=client_url,
                auto_apply_migrations=_truthy(auto_migrate),
                log_level=log_level,
            ),
        )
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "AuthConfig",
    "DatabaseConfig",
    "ServerConfig",
    "load_config",
]
