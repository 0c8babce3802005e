"""
Preference Routes

    GET   /preference   → resolved preference (store → cookie → Accept-Language)
    POST  /preference   → merge a partial preference and persist it

Both endpoints are public: anonymous callers are served from the cookie,
authenticated callers from the durable store first. Both refresh the
``preference`` cookie and answer with the returned locale in
Content-Language, which LanguageMiddleware leaves alone.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response

from preference_api.auth import AuthContext, get_auth_context
from preference_api.schemas.preference import Preference, PreferenceUpdate
from preference_api.services.preference_service import get_preference, update_preference
from preference_api.services.preference_store import PreferenceStore, get_preference_store

router = APIRouter(tags=["Preference"])
logger = logging.getLogger(__name__)


@router.get("/preference", response_model=Preference)
async def read_preference(
    request: Request,
    response: Response,
    auth: AuthContext = Depends(get_auth_context),
    store: PreferenceStore = Depends(get_preference_store),
) -> Preference:
    """Return the preference that applies to the current request."""
    pref = await get_preference(auth, store, request, response)
    response.headers["Content-Language"] = pref.locale
    return pref


@router.post("/preference", response_model=Preference)
async def write_preference(
    data: PreferenceUpdate,
    request: Request,
    response: Response,
    auth: AuthContext = Depends(get_auth_context),
    store: PreferenceStore = Depends(get_preference_store),
) -> Preference:
    """
    Update the current preference.

    Only provided fields are updated; others keep their resolved value.
    Unknown fields and unsupported locales are rejected with 422.
    """
    pref = await update_preference(auth, store, request, response, data)
    response.headers["Content-Language"] = pref.locale
    return pref
