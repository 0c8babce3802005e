"""
Preference Service

Resolves and updates the preference record applied to a request.

Functions:
    parse_preference             — validate untrusted data, None when unusable
    generate_default_preference  — default from the Accept-Language header
    get_preference               — store → cookie → default, then write cookie
    update_preference            — resolve, merge partial, store, write cookie

Source precedence for get_preference:
    1. durable store (authenticated callers only)
    2. ``preference`` cookie
    3. default negotiated from Accept-Language, else settings.default_locale

Invalid data from the store or the cookie is treated as absent. Storage
errors propagate; on update the store write happens before the final
cookie write, so a failed write never reaches the cookie.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from fastapi import Request, Response
from pydantic import BaseModel

from preference_api.auth import AuthContext
from preference_api.config import settings
from preference_api.constants import PREFERENCE_COOKIE_MAX_AGE, PREFERENCE_COOKIE_NAME
from preference_api.exceptions import PreferenceValidationError
from preference_api.i18n.locale import detect_locale, parse_accept_language
from preference_api.schemas.preference import Preference, PreferenceUpdate, safe_parse
from preference_api.services.preference_store import PreferenceStore
from preference_api.utils.cookies import get_cookie_json, set_cookie_json

logger = logging.getLogger(__name__)

PreferenceSource = Callable[[], Awaitable[Preference | None]]


def parse_preference(data: Any) -> Preference | None:
    """Return ``data`` as a Preference, or None if it is absent or invalid."""
    if data is None:
        return None
    result = safe_parse(Preference, data)
    if not result.success:
        logger.debug("Discarding invalid preference data: %s", result.errors)
        return None
    return result.data


def generate_default_preference(accept_language: str | None) -> Preference:
    """Build a preference from the client's declared languages."""
    locale = detect_locale(parse_accept_language(accept_language))
    return Preference(locale=locale or settings.default_locale)


def write_preference_cookie(response: Response, preference: Preference) -> None:
    set_cookie_json(response, PREFERENCE_COOKIE_NAME, preference, max_age=PREFERENCE_COOKIE_MAX_AGE)


async def _first_available(sources: list[tuple[str, PreferenceSource]]) -> tuple[str, Preference] | None:
    # Sources run lazily, in order, until one yields a value
    for name, source in sources:
        preference = await source()
        if preference is not None:
            return name, preference
    return None


async def get_preference(
    auth: AuthContext,
    store: PreferenceStore,
    request: Request,
    response: Response,
) -> Preference:
    """Resolve the caller's preference and refresh the preference cookie.

    Reads the store at most once (authenticated callers only) and never
    writes it.

    Raises:
        PreferenceStorageError: if the store lookup fails.
    """

    async def from_store() -> Preference | None:
        record = await store.find_unique(auth.user.id)
        if record is None or not isinstance(record.data, dict):
            return None
        return parse_preference(record.data)

    async def from_cookie() -> Preference | None:
        return parse_preference(get_cookie_json(request, PREFERENCE_COOKIE_NAME))

    sources: list[tuple[str, PreferenceSource]] = []
    if auth.is_authenticated:
        sources.append(("store", from_store))
    sources.append(("cookie", from_cookie))

    resolved = await _first_available(sources)
    if resolved is None:
        source, preference = "default", generate_default_preference(request.headers.get("Accept-Language"))
    else:
        source, preference = resolved

    logger.debug("Preference resolved from %s: %s", source, preference.model_dump())

    write_preference_cookie(response, preference)
    return preference


def _validate_partial(partial: PreferenceUpdate | Mapping[str, Any]) -> PreferenceUpdate:
    if isinstance(partial, PreferenceUpdate):
        return partial
    if isinstance(partial, BaseModel):
        partial = partial.model_dump(exclude_unset=True)
    result = safe_parse(PreferenceUpdate, partial)
    if not result.success:
        raise PreferenceValidationError(result.errors)
    return result.data


async def update_preference(
    auth: AuthContext,
    store: PreferenceStore,
    request: Request,
    response: Response,
    partial: PreferenceUpdate | Mapping[str, Any],
) -> Preference:
    """Merge a partial update onto the resolved preference and persist it.

    Fields missing from ``partial`` keep their resolved value. Authenticated
    callers get the merged value upserted into the store before the cookie
    is written.

    Raises:
        PreferenceValidationError: if ``partial`` is not a valid partial
            preference. Raised before anything is read or written.
        PreferenceStorageError: if the store lookup or upsert fails.
    """
    update = _validate_partial(partial)

    current = await get_preference(auth, store, request, response)
    merged = Preference.model_validate({**current.model_dump(), **update.model_dump(exclude_unset=True)})

    if auth.is_authenticated:
        await store.upsert(auth.user.id, merged.model_dump(mode="json"))
        logger.info("Preference updated for user_id=%s: %s", auth.user.id, merged.model_dump())

    write_preference_cookie(response, merged)
    return merged
