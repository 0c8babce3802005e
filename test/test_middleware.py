"""
Tests for middleware modules
"""

import json
import logging

from conftest import make_request
from fastapi import FastAPI, Request, Response
from fastapi.testclient import TestClient

from preference_api.auth import AuthContext
from preference_api.config import settings
from preference_api.middleware.language import LanguageMiddleware, detect_request_locale
from preference_api.middleware.logging import (
    RequestIdFilter,
    StructuredFormatter,
    StructuredLoggingMiddleware,
    request_id_var,
)


def _locale_app() -> FastAPI:
    app = FastAPI()

    @app.get("/test")
    async def test_route(request: Request):
        return {"locale": request.state.locale}

    @app.get("/explicit")
    async def explicit_route(response: Response):
        response.headers["Content-Language"] = "ar"
        return {}

    app.add_middleware(LanguageMiddleware)
    return app


class TestDetectRequestLocale:
    def test_cookie_beats_accept_language(self):
        request = make_request(headers={"Accept-Language": "fr"}, cookies={"preference": '{"locale":"es"}'})
        assert detect_request_locale(request) == "es"

    def test_x_language_header_is_not_consulted(self):
        request = make_request(headers={"X-Language": "de", "Accept-Language": "fr"})
        assert detect_request_locale(request) == "fr"

    def test_invalid_cookie_is_ignored(self):
        request = make_request(headers={"Accept-Language": "fr"}, cookies={"preference": '{"locale":"xx"}'})
        assert detect_request_locale(request) == "fr"

    def test_region_fallback_from_accept_language(self):
        request = make_request(headers={"Accept-Language": "pt-PT"})
        assert detect_request_locale(request) == "pt-BR"

    def test_default_locale(self):
        assert detect_request_locale(make_request()) == settings.default_locale


class TestLanguageMiddleware:
    def test_sets_request_state_locale(self):
        client = TestClient(_locale_app())

        response = client.get("/test", headers={"Accept-Language": "de-CH, en;q=0.5"})

        assert response.json() == {"locale": "de"}
        assert response.headers["content-language"] == "de"

    def test_never_writes_cookies(self):
        client = TestClient(_locale_app())

        response = client.get("/test", headers={"Cookie": 'preference={"locale":"es"}'})

        assert response.json() == {"locale": "es"}
        assert "set-cookie" not in response.headers

    def test_keeps_content_language_set_by_route(self):
        client = TestClient(_locale_app())

        response = client.get("/explicit", headers={"Accept-Language": "de"})

        assert response.headers.get_list("content-language") == ["ar"]


class TestStructuredLoggingMiddleware:
    def _app(self) -> FastAPI:
        app = FastAPI()

        @app.get("/test")
        async def test_route():
            return {"request_id": request_id_var.get()}

        app.add_middleware(StructuredLoggingMiddleware)
        return app

    def test_echoes_request_id(self):
        client = TestClient(self._app())

        response = client.get("/test", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"
        assert response.json() == {"request_id": "abc-123"}

    def test_generates_request_id(self):
        client = TestClient(self._app())

        response = client.get("/test")

        assert len(response.headers["X-Request-ID"]) == 36

    def test_logs_access_line(self, caplog):
        client = TestClient(self._app())

        with caplog.at_level(logging.INFO, logger="preference_api.access"):
            client.get("/test")

        records = [r for r in caplog.records if r.name == "preference_api.access"]
        assert len(records) == 1
        assert records[0].path == "/test"
        assert records[0].status_code == 200


class TestStructuredFormatter:
    def test_formats_json_with_extra_fields(self):
        record = logging.LogRecord("preference_api", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        record.locale = "fr"
        token = request_id_var.set("req-1")
        try:
            RequestIdFilter().filter(record)
        finally:
            request_id_var.reset(token)

        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "hello world"
        assert data["level"] == "INFO"
        assert data["request_id"] == "req-1"
        assert data["locale"] == "fr"


class TestAccessLogContext:
    def _app(self) -> FastAPI:
        app = FastAPI()

        @app.get("/signed-in")
        async def signed_in(request: Request):
            request.state.auth = AuthContext.authenticated(7)
            return {}

        @app.get("/health")
        async def health():
            return {"status": "ok"}

        app.add_middleware(LanguageMiddleware)
        app.add_middleware(StructuredLoggingMiddleware)
        return app

    def _access_records(self, caplog):
        return [r for r in caplog.records if r.name == "preference_api.access"]

    def test_records_locale_and_user(self, caplog):
        client = TestClient(self._app())

        with caplog.at_level(logging.INFO, logger="preference_api.access"):
            client.get("/signed-in", headers={"Accept-Language": "es"})

        (record,) = self._access_records(caplog)
        assert record.locale == "es"
        assert record.user_id == 7

    def test_health_checks_are_not_logged(self, caplog):
        client = TestClient(self._app())

        with caplog.at_level(logging.INFO, logger="preference_api.access"):
            client.get("/health")

        assert self._access_records(caplog) == []
