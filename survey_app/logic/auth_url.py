"""Google sign-in redirect URL construction.

The base URL is passed in explicitly; callers build an `AuthUrlConfig` from
the loaded application configuration on every request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from survey_app.config import AppConfig

DEFAULT_API_BASE_URL = "http://localhost:3000"
GOOGLE_AUTH_PATH = "/auth/google"


@dataclass(frozen=True)
class AuthUrlConfig:
    api_base_url: Optional[str] = None


def auth_url_config_from_app_config(cfg: AppConfig) -> AuthUrlConfig:
    return AuthUrlConfig(api_base_url=cfg.auth.api_base_url)


def get_google_auth_url(config: AuthUrlConfig) -> str:
    """Return `{base}/auth/google`.

    An unset or empty base falls back to http://localhost:3000. The base is
    used verbatim, so a trailing slash produces `//auth/google`.
    """
    base = config.api_base_url or DEFAULT_API_BASE_URL
    return f"{base}{GOOGLE_AUTH_PATH}"


__all__ = [
    "AuthUrlConfig",
    "DEFAULT_API_BASE_URL",
    "auth_url_config_from_app_config",
    "get_google_auth_url",
]
