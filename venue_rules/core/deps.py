from __future__ import annotations

import hmac
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from venue_rules.core.config import Settings, get_settings
from venue_rules.db.session import SessionLocal
from venue_rules.services.gemini_client import GeminiClient

ADMIN_API_KEY_HEADER = "X-Admin-API-Key"


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_gemini_client(settings: Settings = Depends(get_settings)) -> GeminiClient:
    if not settings.gemini_api_key:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Rule parsing is not configured")
    return GeminiClient.from_settings(settings)


def require_admin_api_key(
    x_admin_api_key: Optional[str] = Header(default=None, alias=ADMIN_API_KEY_HEADER),
    settings: Settings = Depends(get_settings),
) -> None:
    """Guard for template management.

    An empty ``ADMIN_API_KEY`` leaves the routes open for local use.
    """
    if not settings.admin_api_key:
        return
    if not x_admin_api_key or not hmac.compare_digest(x_admin_api_key, settings.admin_api_key):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or missing admin API key")
