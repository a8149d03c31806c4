"""Tests for wren.middleware.cors: permissive CORS headers and preflight."""

from wren.app import App
from wren.config import AppConfig
from wren.middleware.cors import CORSPolicy
from wren.testing import TestClient


def _make_cors_app(**overrides: object) -> App:
    app = App(cors=True, **overrides)

    @app.get("/api/data")
    def data(ctx) -> None:
        ctx.send_json({"message": "hello"})

    return app


class TestCORSPolicy:
    def test_from_config(self) -> None:
        policy = CORSPolicy.from_config(AppConfig(cors_allow_origin="https://example.com"))
        assert policy.allow_origin == "https://example.com"

    def test_headers(self) -> None:
        assert CORSPolicy().headers == (
            ("Access-Control-Allow-Origin", "*"),
            ("Access-Control-Allow-Methods", "GET, POST, PUT, DELETE, PATCH, OPTIONS"),
            ("Access-Control-Allow-Headers", "Content-Type, Authorization, X-Requested-With"),
        )

    def test_apply_non_preflight(self, make_context) -> None:
        ctx = make_context("GET")
        assert CORSPolicy().apply(ctx) is False
        assert ctx.response_sent is False
        assert ctx.final_response().header("Access-Control-Allow-Origin") == "*"

    def test_apply_preflight(self, make_context) -> None:
        ctx = make_context("OPTIONS")
        assert CORSPolicy().apply(ctx) is True
        assert ctx.response.status == 204


class TestCORSApp:
    async def test_headers_on_regular_response(self) -> None:
        async with TestClient(_make_cors_app()) as client:
            response = await client.get("/api/data")
            assert response.status == 200
            assert ("access-control-allow-origin", "*") in response.headers
            assert response.json() == {"message": "hello"}

    async def test_headers_on_404(self) -> None:
        async with TestClient(_make_cors_app()) as client:
            response = await client.get("/nope")
            assert response.status == 404
            assert ("access-control-allow-origin", "*") in response.headers

    async def test_preflight_on_any_path(self) -> None:
        async with TestClient(_make_cors_app()) as client:
            response = await client.options("/not/registered")
            assert response.status == 204
            assert response.body == b""
            assert ("access-control-allow-methods", "GET, POST, PUT, DELETE, PATCH, OPTIONS") in response.headers
            assert ("content-length", "0") in response.headers

    async def test_preflight_skips_middleware(self) -> None:
        app = _make_cors_app()
        calls: list[str] = []
        app.use(lambda ctx: calls.append(ctx.method))
        async with TestClient(app) as client:
            await client.options("/api/data")
            await client.get("/api/data")
        assert calls == ["GET"]

    async def test_preflight_bypasses_rate_limit(self) -> None:
        app = _make_cors_app(rate_limit=True, rate_max_requests=1)
        async with TestClient(app) as client:
            assert (await client.get("/api/data")).status == 200
            assert (await client.options("/api/data")).status == 204
            assert (await client.get("/api/data")).status == 429

    async def test_custom_origin(self) -> None:
        app = _make_cors_app(cors_allow_origin="https://example.com")
        async with TestClient(app) as client:
            response = await client.get("/api/data")
            assert ("access-control-allow-origin", "https://example.com") in response.headers

    async def test_disabled_by_default(self) -> None:
        app = App()
        app.get("/x", lambda ctx: ctx.send_text("x"))
        async with TestClient(app) as client:
            response = await client.get("/x")
            names = {name for name, _ in response.headers}
            assert "access-control-allow-origin" not in names
            assert (await client.options("/x")).status == 404
