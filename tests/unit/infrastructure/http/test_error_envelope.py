# tests/unit/infrastructure/http/test_error_envelope.py
from __future__ import annotations

from fastapi import HTTPException
from fastapi.testclient import TestClient

from tickerbot.infrastructure.http.errors import error_envelope
from tickerbot.main import create_app


def test_envelope_omits_empty_fields() -> None:
    assert error_envelope(code="X", http_status=400, message="bad") == {
        "error": {"code": "X", "http_status": 400, "message": "bad"}
    }


def _app(make_settings):
    app = create_app(make_settings(DEV_MODE=True))

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("kaboom")

    @app.get("/gone")
    async def gone() -> None:
        raise HTTPException(status_code=410, detail="Gone for good")

    @app.get("/typed/{n}")
    async def typed(n: int) -> dict[str, int]:
        return {"n": n}

    return app


def test_unhandled_exception_becomes_internal_error(make_settings) -> None:
    client = TestClient(_app(make_settings), raise_server_exceptions=False)
    response = client.get("/boom", headers={"X-Request-ID": "req-9"})

    assert response.status_code == 500
    body = response.json()["error"]
    assert body["code"] == "INTERNAL_ERROR"
    assert "kaboom" not in response.text


def test_http_exception_keeps_status(make_settings) -> None:
    response = TestClient(_app(make_settings)).get("/gone")
    assert response.status_code == 410
    assert response.json()["error"]["message"] == "Gone for good"


def test_validation_error_is_422(make_settings) -> None:
    response = TestClient(_app(make_settings)).get("/typed/abc")
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_unknown_route_uses_envelope(make_settings) -> None:
    response = TestClient(_app(make_settings)).get("/nope", headers={"X-Request-ID": "req-404"})
    assert response.status_code == 404
    body = response.json()["error"]
    assert body["code"] == "HTTP_ERROR"
    assert body["request_id"] == "req-404"
