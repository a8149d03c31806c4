"""Tests for wren.server.errors: the ErrorDispatcher recovery chain."""

import logging

from wren.errors import AppError, ErrorKind, HandlerError, ValidationFailure
from wren.server.errors import ErrorDispatcher, default_error_payload


def _validation_handler(error: AppError, ctx) -> bool:
    if error.kind is not ErrorKind.VALIDATION:
        return False
    ctx.send_json(error.to_payload(), error.status)
    return True


class TestDefaultPayload:
    def test_with_message(self) -> None:
        assert default_error_payload(HandlerError("db down")) == {
            "error": "Internal server error",
            "message": "db down",
        }

    def test_unprintable_error(self) -> None:
        class Unprintable(Exception):
            def __str__(self) -> str:
                raise RuntimeError("no")

        assert default_error_payload(Unprintable()) == {"error": "Internal server error"}


class TestErrorDispatcher:
    async def test_claimed_by_matching_handler(self, make_context) -> None:
        ctx = make_context()
        dispatcher = ErrorDispatcher((_validation_handler,))
        claimed = await dispatcher.handle(ValidationFailure("bad", {"field": "name"}), ctx)
        assert claimed is True
        assert ctx.response.status == 400
        assert ctx.response.json()["details"] == {"field": "name"}

    async def test_first_claim_wins(self, make_context) -> None:
        calls: list[str] = []

        def first(error, ctx) -> bool:
            calls.append("first")
            ctx.send_text("first")
            return True

        def second(error, ctx) -> bool:
            calls.append("second")
            return True

        ctx = make_context()
        await ErrorDispatcher((first, second)).handle(HandlerError("x"), ctx)
        assert calls == ["first"]

    async def test_unclaimed_gets_default_500(self, make_context, caplog) -> None:
        ctx = make_context("GET", "/boom")
        with caplog.at_level(logging.ERROR, logger="wren.server"):
            claimed = await ErrorDispatcher((_validation_handler,)).handle(
                HandlerError("kaboom"), ctx
            )
        assert claimed is False
        assert ctx.response.status == 500
        assert ctx.response.json() == {"error": "Internal server error", "message": "kaboom"}
        assert "/boom" in caplog.text

    async def test_async_handler(self, make_context) -> None:
        async def handler(error, ctx) -> bool:
            ctx.send_json({"handled": error.message}, 503)
            return True

        ctx = make_context()
        assert await ErrorDispatcher((handler,)).handle(AppError("later"), ctx) is True
        assert ctx.response.status == 503

    async def test_failing_handler_is_skipped(self, make_context, caplog) -> None:
        def broken(error, ctx) -> bool:
            raise RuntimeError("handler bug")

        ctx = make_context()
        with caplog.at_level(logging.ERROR, logger="wren.server"):
            claimed = await ErrorDispatcher((broken, _validation_handler)).handle(
                ValidationFailure("bad"), ctx
            )
        assert claimed is True
        assert ctx.response.status == 400
        assert "handler bug" in caplog.text

    async def test_empty_dispatcher(self, make_context) -> None:
        ctx = make_context()
        assert len(ErrorDispatcher()) == 0
        assert await ErrorDispatcher().handle(HandlerError.wrap(KeyError("id")), ctx) is False
        assert ctx.response.status == 500

    async def test_declined_then_claimed(self, make_context) -> None:
        calls: list[str] = []

        def declines(error, ctx) -> bool:
            calls.append("h1")
            return False

        def claims(error, ctx) -> bool:
            calls.append("h2")
            ctx.send_text("handled", 400)
            return True

        def never(error, ctx) -> bool:
            calls.append("h3")
            return True

        ctx = make_context()
        assert await ErrorDispatcher((declines, claims, never)).handle(AppError("x"), ctx) is True
        assert calls == ["h1", "h2"]
        assert ctx.response.status == 400
