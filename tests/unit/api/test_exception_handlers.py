"""Unit tests for exception handlers."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api.exception_handlers import setup_exception_handlers
from core.exceptions import (
    ProfileNotFoundError,
    ProfileValidationError,
    SlugTakenError,
    UpstreamUnavailableError,
)


def _create_test_app() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


async def _get(app: FastAPI, path: str):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        return await c.get(path)


class TestExceptionHandlers:
    @pytest.mark.asyncio
    async def test_app_exception_returns_error_code_and_message(self) -> None:
        app = _create_test_app()

        @app.get("/raise-app")
        async def _() -> None:
            raise ProfileNotFoundError("some-id")

        response = await _get(app, "/raise-app")

        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "PROFILE_NOT_FOUND"
        assert "some-id" in body["message"]
        assert body["details"]["key"] == "some-id"

    @pytest.mark.asyncio
    async def test_conflict_carries_slug(self) -> None:
        app = _create_test_app()

        @app.get("/raise-slug")
        async def _() -> None:
            raise SlugTakenError("ahmed")

        response = await _get(app, "/raise-slug")

        assert response.status_code == 409
        assert response.json()["details"] == {"slug": "ahmed"}

    @pytest.mark.asyncio
    async def test_profile_validation_lists_fields(self) -> None:
        app = _create_test_app()

        @app.get("/raise-invalid")
        async def _() -> None:
            raise ProfileValidationError([{"field": "mood", "message": "too long"}])

        response = await _get(app, "/raise-invalid")

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["details"] == [{"field": "mood", "message": "too long"}]

    @pytest.mark.asyncio
    async def test_upstream_failure_is_retryable(self) -> None:
        app = _create_test_app()

        @app.get("/raise-upstream")
        async def _() -> None:
            raise UpstreamUnavailableError("identity provider")

        response = await _get(app, "/raise-upstream")

        assert response.status_code == 503
        assert response.json()["details"] == {"service": "identity provider", "retryable": True}

    @pytest.mark.asyncio
    async def test_http_exception_returns_standard_format(self) -> None:
        from starlette.exceptions import HTTPException

        app = _create_test_app()

        @app.get("/raise-http")
        async def _() -> None:
            raise HTTPException(status_code=403, detail="Forbidden")

        response = await _get(app, "/raise-http")

        assert response.status_code == 403
        body = response.json()
        assert body["error_code"] == "FORBIDDEN"
        assert body["message"] == "Forbidden"

    @pytest.mark.asyncio
    async def test_unknown_route_returns_http_error(self) -> None:
        response = await _get(_create_test_app(), "/nope")

        assert response.status_code == 404
        assert response.json()["error_code"] == "HTTP_ERROR"

    @pytest.mark.asyncio
    async def test_validation_error_returns_field_details(self) -> None:
        from pydantic import BaseModel, Field

        app = _create_test_app()

        class Body(BaseModel):
            title: str = Field(..., min_length=1)

        @app.post("/validate")
        async def _(body: Body) -> dict[str, bool]:
            return {"ok": True}

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.post("/validate", json={"title": ""})

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["details"][0]["field"] == "title"

    @pytest.mark.asyncio
    async def test_unhandled_exception_returns_500(self) -> None:
        import json
        from unittest.mock import MagicMock

        app = _create_test_app()

        # Build a fake request with request.state.request_id
        mock_request = MagicMock()
        mock_request.state.request_id = "test-req-id"

        exc = RuntimeError("Something went wrong")

        handler = app.exception_handlers.get(Exception)
        assert handler is not None, "Global exception handler not registered"

        response = await handler(mock_request, exc)  # type: ignore[misc]

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["error_code"] == "INTERNAL_ERROR"
        assert body["details"]["request_id"] == "test-req-id"
