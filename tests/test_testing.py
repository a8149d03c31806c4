"""Tests for wren.testing: the ASGI scope TestClient hands to the app."""

from typing import Any

from wren.testing import TestClient


class _ScopeRecorder:
    """Minimal ASGI app that records the scope and answers 204."""

    def __init__(self) -> None:
        self.scope: dict[str, Any] = {}

    def _ensure_frozen(self) -> None:
        pass

    async def __call__(self, scope, receive, send) -> None:
        self.scope = scope
        await send({"type": "http.response.start", "status": 204, "headers": []})
        await send({"type": "http.response.body", "body": b""})


class TestScope:
    async def test_path_is_decoded_raw_path_is_not(self) -> None:
        recorder = _ScopeRecorder()
        async with TestClient(recorder) as client:  # type: ignore[arg-type]
            await client.get("/files/a%3Fb?v=2")
        assert recorder.scope["path"] == "/files/a?b"
        assert recorder.scope["raw_path"] == b"/files/a%3Fb"
        assert recorder.scope["query_string"] == b"v=2"

    async def test_client_override(self) -> None:
        recorder = _ScopeRecorder()
        async with TestClient(recorder) as client:  # type: ignore[arg-type]
            response = await client.request("GET", "/", client=("10.0.0.9", 5000))
        assert recorder.scope["client"] == ("10.0.0.9", 5000)
        assert response.status == 204
