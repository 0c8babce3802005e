"""
Tests for the JSON cookie helpers
"""

from conftest import cookie_writes, make_request
from starlette.responses import Response

from preference_api.schemas.preference import Preference
from preference_api.utils.cookies import COOKIE_OPTIONS_BASE, get_cookie_json, set_cookie_json


class TestGetCookieJson:
    def test_missing_cookie(self):
        assert get_cookie_json(make_request(), "preference") is None

    def test_valid_json(self):
        request = make_request(cookies={"preference": '{"locale":"fr"}'})
        assert get_cookie_json(request, "preference") == {"locale": "fr"}

    def test_invalid_json(self):
        request = make_request(cookies={"preference": "{locale:fr"})
        assert get_cookie_json(request, "preference") is None

    def test_other_cookies_ignored(self):
        request = make_request(cookies={"session": "abc", "preference": "[1,2]"})
        assert get_cookie_json(request, "preference") == [1, 2]


class TestSetCookieJson:
    def test_serializes_pydantic_models(self):
        response = Response()
        set_cookie_json(response, "preference", Preference(locale="de"), max_age=60)
        assert cookie_writes(response) == [{"locale": "de"}]

    def test_applies_base_options_and_max_age(self):
        response = Response()
        set_cookie_json(response, "preference", {"locale": "de"}, max_age=31536000)

        header = response.headers["set-cookie"].lower()
        assert "max-age=31536000" in header
        assert f"path={COOKIE_OPTIONS_BASE['path']}" in header
        assert f"samesite={COOKIE_OPTIONS_BASE['samesite']}" in header
        if COOKIE_OPTIONS_BASE["secure"]:
            assert "secure" in header
        if COOKIE_OPTIONS_BASE["httponly"]:
            assert "httponly" in header

    def test_explicit_options_override_base(self):
        response = Response()
        set_cookie_json(response, "preference", {"locale": "de"}, max_age=60, path="/app")
        assert "path=/app" in response.headers["set-cookie"].lower()

    def test_replaces_previous_value_for_same_name(self):
        response = Response()
        set_cookie_json(response, "preference", {"locale": "fr"}, max_age=60)
        set_cookie_json(response, "preference", {"locale": "de"}, max_age=60)

        assert cookie_writes(response) == [{"locale": "de"}]

    def test_keeps_other_cookies(self):
        response = Response()
        response.set_cookie("session", "abc")
        set_cookie_json(response, "preference", {"locale": "fr"}, max_age=60)
        set_cookie_json(response, "preference", {"locale": "de"}, max_age=60)

        set_cookies = [value for key, value in response.raw_headers if key == b"set-cookie"]
        assert len(set_cookies) == 2
        assert any(value.startswith(b"session=") for value in set_cookies)
