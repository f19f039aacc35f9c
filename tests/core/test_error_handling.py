"""Global exception handling: envelope shape, status mapping, leak control."""

from __future__ import annotations

import json
from collections.abc import Callable, Generator
from unittest.mock import patch

import pytest
from fastapi import FastAPI, HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

from core.error_handler import (
    ExceptionNormalizationMiddleware,
    _build_error_response,
    global_exception_handler,
)
from core.exceptions import DuplicateJargonError, JargonNotFoundError
from core.middleware import CorrelationIdMiddleware


class Item(BaseModel):
    name: str = Field(min_length=3)
    qty: int = Field(ge=1)


def _build_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(ExceptionNormalizationMiddleware)
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(HTTPException, global_exception_handler)
    app.add_exception_handler(RequestValidationError, global_exception_handler)

    @app.post("/items")
    async def create_item(item: Item):
        return {"ok": True, "item": item.model_dump()}

    @app.get("/duplicate")
    async def duplicate():
        raise DuplicateJargonError("果子")

    @app.get("/missing")
    async def missing():
        raise JargonNotFoundError("Jargon 7 not found")

    @app.get("/boom")
    async def boom():
        raise RuntimeError("Exploded with secret=should_not_leak")

    @app.get("/unavailable")
    async def unavailable():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Jargon mapping could not be reloaded",
        )

    return app


@pytest.fixture
def client_for() -> Generator[Callable[[str], TestClient], None, None]:
    with patch("core.error_handler.get_settings") as mocked:

        def _make(env: str) -> TestClient:
            mocked.return_value.ENVIRONMENT = env
            return TestClient(_build_app())

        yield _make


class TestGlobalExceptionHandler:
    def test_validation_error_production(self, client_for) -> None:
        resp = client_for("production").post("/items", json={"name": "ab", "qty": 0})
        assert resp.status_code == 422
        data = resp.json()
        assert data["error"]["type"] == "validation_error"
        assert "validation_errors" not in data["error"]

    def test_validation_error_development(self, client_for) -> None:
        resp = client_for("development").post("/items", json={"name": "ab", "qty": 0})
        assert resp.status_code == 422
        assert "validation_errors" in resp.json()["error"]

    def test_duplicate_jargon_is_conflict(self, client_for) -> None:
        resp = client_for("production").get("/duplicate")
        assert resp.status_code == 409
        data = resp.json()
        assert data["error"]["type"] == "domain_error"
        assert data["message"] == "The requested resource already exists"

    def test_missing_jargon_is_not_found(self, client_for) -> None:
        resp = client_for("development").get("/missing")
        assert resp.status_code == 404
        assert resp.json()["error"]["type"] == "domain_error"

    def test_generic_exception_production(self, client_for) -> None:
        resp = client_for("production").get("/boom")
        assert resp.status_code == 500
        body = resp.json()
        assert body["error"]["type"] == "internal_server_error"
        assert "traceback" not in body["error"]
        assert "secret=should_not_leak" not in str(body)

    def test_generic_exception_development(self, client_for) -> None:
        resp = client_for("development").get("/boom")
        assert resp.status_code == 500
        body = resp.json()
        assert "traceback" in body["error"]
        assert body["error"]["exception_type"] == "RuntimeError"

    def test_http_exception_keeps_status(self, client_for) -> None:
        resp = client_for("production").get("/unavailable")
        assert resp.status_code == 503
        body = resp.json()
        assert body["success"] is False
        assert body["error"]["type"] == "http_error"
        assert body["error"]["correlation_id"]
        assert "details" not in body["error"]

    def test_http_exception_details_in_development(self, client_for) -> None:
        resp = client_for("development").get(
            "/unavailable", headers={"X-Correlation-ID": "cid-1"}
        )
        body = resp.json()
        assert body["error"]["details"]["detail"] == "Jargon mapping could not be reloaded"
        assert body["error"]["correlation_id"] == "cid-1"


class TestBuildErrorResponse:
    def test_production_hides_optional_fields(self) -> None:
        resp = _build_error_response(
            correlation_id="cid",
            error_type="internal_server_error",
            message="An internal error occurred",
            environment="production",
            details={"debug": True},
            traceback_str="trace",
            exception_type="ValueError",
            validation_errors={"x": 1},
        )
        body = json.loads(resp.body)

        assert resp.status_code == 500
        assert body["error"] == {"correlation_id": "cid", "type": "internal_server_error"}

    def test_development_includes_optional_fields(self) -> None:
        resp = _build_error_response(
            correlation_id="cid",
            error_type="internal_server_error",
            message="An internal error occurred",
            environment="development",
            details={"debug": True},
            traceback_str="trace",
            exception_type="ValueError",
            validation_errors={"x": 1},
            status_code=409,
        )
        body = json.loads(resp.body)

        assert resp.status_code == 409
        assert body["error"]["details"] == {"debug": True}
        assert body["error"]["traceback"] == "trace"
        assert body["error"]["exception_type"] == "ValueError"
        assert body["error"]["validation_errors"] == {"x": 1}
