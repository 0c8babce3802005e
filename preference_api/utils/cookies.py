"""
JSON Cookie Helpers

Read and write cookies whose value is a JSON document. The base cookie
attributes (path, secure, httponly, samesite, domain) come from settings
and are shared by every cookie the service writes.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import Request, Response
from pydantic import BaseModel

from preference_api.config import settings

logger = logging.getLogger(__name__)

COOKIE_OPTIONS_BASE: dict[str, Any] = {
    "path": settings.cookie_path,
    "secure": settings.cookie_secure,
    "httponly": settings.cookie_httponly,
    "samesite": settings.cookie_samesite,
    "domain": settings.cookie_domain,
}


def get_cookie_json(request: Request, name: str) -> Any | None:
    """Return the decoded JSON value of a request cookie.

    Returns None when the cookie is absent or is not valid JSON.
    """
    raw = request.cookies.get(name)
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.debug("Ignoring cookie %r: value is not valid JSON", name)
        return None


def _drop_set_cookie(response: Response, name: str) -> None:
    prefix = f"{name}=".encode("latin-1")
    response.raw_headers[:] = [
        (key, value) for key, value in response.raw_headers if not (key == b"set-cookie" and value.startswith(prefix))
    ]


def set_cookie_json(response: Response, name: str, value: Any, *, max_age: int, **options: Any) -> None:
    """Write ``value`` as a JSON cookie on ``response``.

    Any Set-Cookie header already present on the response for the same
    cookie name is replaced, so one response carries at most one value per
    cookie.

    Args:
        response: Response to set the cookie on.
        name:     Cookie name.
        value:    JSON-serializable value or pydantic model.
        max_age:  Lifetime in seconds.
        options:  Cookie attributes; defaults to COOKIE_OPTIONS_BASE.
    """
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    payload = json.dumps(value, separators=(",", ":"), ensure_ascii=True)

    _drop_set_cookie(response, name)
    response.set_cookie(key=name, value=payload, max_age=max_age, **{**COOKIE_OPTIONS_BASE, **options})
