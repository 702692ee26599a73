"""Google sign-in URL endpoint.

Only exposes where the browser should be redirected; the OAuth exchange
itself is handled elsewhere.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from survey_app.config import AppConfig
from survey_app.logic.auth_url import auth_url_config_from_app_config, get_google_auth_url
from survey_app.routes.dependencies import get_app_config

router = APIRouter(prefix="/auth")


@router.get("/google/url", summary="Google sign-in redirect URL", operation_id="getGoogleAuthUrl")
def google_auth_url(cfg: AppConfig = Depends(get_app_config)) -> dict:
    return {"url": get_google_auth_url(auth_url_config_from_app_config(cfg))}


__all__ = ["router"]
