"""
Internationalization Routes

    GET /i18n/languages → supported locales with metadata (public)
"""

from typing import Any

from fastapi import APIRouter, Request

from preference_api.config import settings
from preference_api.i18n.locale import get_language_info

router = APIRouter(tags=["Internationalization"])


@router.get("/i18n/languages")
async def list_languages(request: Request) -> dict[str, Any]:
    """List supported locales in their configured order."""
    return {
        "default": settings.default_locale,
        "current": getattr(request.state, "locale", settings.default_locale),
        "languages": [get_language_info(code) for code in settings.supported_locales],
    }
