"""
Language Detection Middleware

Sets request.state.locale from:
  1. ``preference`` cookie (when it decodes to a valid preference)
  2. Accept-Language header (quality-weighted, best-match)
  3. settings.default_locale (fallback)

No DB lookups and no cookie writes. The preference endpoints resolve the
durable store themselves and set Content-Language from the resolved
preference; the middleware only fills the header in when a route did not.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware

from preference_api.config import settings
from preference_api.constants import PREFERENCE_COOKIE_NAME
from preference_api.i18n.locale import detect_locale, parse_accept_language
from preference_api.schemas.preference import Preference, safe_parse
from preference_api.utils.cookies import get_cookie_json

if TYPE_CHECKING:
    from collections.abc import Callable

    from fastapi import Request
    from starlette.responses import Response


def detect_request_locale(request: Request) -> str:
    # 1. Preference cookie
    cookie = get_cookie_json(request, PREFERENCE_COOKIE_NAME)
    if cookie is not None:
        result = safe_parse(Preference, cookie)
        if result.success:
            return result.data.locale

    # 2. Accept-Language quality matching
    return detect_locale(parse_accept_language(request.headers.get("Accept-Language"))) or settings.default_locale


class LanguageMiddleware(BaseHTTPMiddleware):
    """Detect the request locale and attach it to request.state.locale."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.locale = detect_request_locale(request)
        response = await call_next(request)
        response.headers.setdefault("Content-Language", request.state.locale)
        return response
