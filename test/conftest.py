"""
Pytest configuration and fixtures for the preference service tests

No test needs a live database: the preference store is replaced by an
in-memory fake and SQLAlchemy sessions are mocked.
"""

import json
import os
import sys
from http.cookies import SimpleCookie
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request
from starlette.responses import Response

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH120

from preference_api.auth import AuthContext, get_auth_context  # noqa: E402
from preference_api.exceptions import PreferenceStorageError  # noqa: E402
from preference_api.services.preference_store import get_preference_store  # noqa: E402


class FakePreferenceStore:
    """In-memory PreferenceStore that records every call."""

    def __init__(self, records: dict[int, Any] | None = None):
        self.records = dict(records or {})
        self.find_calls: list[int] = []
        self.upsert_calls: list[tuple[int, dict]] = []

    async def find_unique(self, user_id: int):
        self.find_calls.append(user_id)
        if user_id not in self.records:
            return None
        return SimpleNamespace(user_id=user_id, data=self.records[user_id])

    async def upsert(self, user_id: int, data: dict):
        self.upsert_calls.append((user_id, data))
        self.records[user_id] = data
        return SimpleNamespace(user_id=user_id, data=data)


class FailingPreferenceStore(FakePreferenceStore):
    """Store whose lookup and/or upsert raise a storage error."""

    def __init__(self, fail_find: bool = False, fail_upsert: bool = True, records: dict[int, Any] | None = None):
        super().__init__(records)
        self.fail_find = fail_find
        self.fail_upsert = fail_upsert

    async def find_unique(self, user_id: int):
        if self.fail_find:
            self.find_calls.append(user_id)
            raise PreferenceStorageError(operation="find_unique")
        return await super().find_unique(user_id)

    async def upsert(self, user_id: int, data: dict):
        if self.fail_upsert:
            self.upsert_calls.append((user_id, data))
            raise PreferenceStorageError(operation="upsert")
        return await super().upsert(user_id, data)


def make_request(headers: dict[str, str] | None = None, cookies: dict[str, str] | None = None) -> Request:
    """Build a bare Starlette request with the given headers and cookies."""
    raw_headers = [(key.lower().encode("latin-1"), value.encode("latin-1")) for key, value in (headers or {}).items()]
    if cookies:
        cookie_header = "; ".join(f"{key}={value}" for key, value in cookies.items())
        raw_headers.append((b"cookie", cookie_header.encode("latin-1")))
    return Request({"type": "http", "method": "GET", "path": "/", "query_string": b"", "headers": raw_headers})


def preference_cookie(value: Any) -> dict[str, str]:
    return {"preference": json.dumps(value, separators=(",", ":"))}


def set_cookie_headers(headers: list[str], name: str = "preference") -> list[SimpleCookie]:
    parsed = []
    for header in headers:
        cookie = SimpleCookie()
        cookie.load(header)
        if name in cookie:
            parsed.append(cookie)
    return parsed


def cookie_writes(response: Response, name: str = "preference") -> list[dict]:
    """Decode every Set-Cookie value for ``name`` on a Starlette response."""
    headers = [value.decode("latin-1") for key, value in response.raw_headers if key == b"set-cookie"]
    return [json.loads(cookie[name].value) for cookie in set_cookie_headers(headers, name)]


@pytest.fixture
def fake_store() -> FakePreferenceStore:
    return FakePreferenceStore()


@pytest.fixture
def response() -> Response:
    return Response()


@pytest.fixture
def app():
    from main import app as fastapi_app

    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app, fake_store):
    """Test client with an anonymous caller and the in-memory store."""
    app.dependency_overrides[get_preference_store] = lambda: fake_store
    app.dependency_overrides[get_auth_context] = AuthContext.anonymous
    return TestClient(app)


@pytest.fixture
def authenticate(app):
    """Make every request in the test authenticated as the given user id."""

    def _authenticate(user_id: int = 1) -> None:
        app.dependency_overrides[get_auth_context] = lambda: AuthContext.authenticated(user_id)

    return _authenticate
