"""Tests for wren.context: RequestContext staging and the context variable."""

import logging

import pytest

from wren.context import context_var, get_context
from wren.http.body import NO_BODY
from wren.http.response import Response


class TestRequestContextDefaults:
    def test_initial_state(self, make_context) -> None:
        ctx = make_context("POST", "/users", query_string=b"page=2")
        assert ctx.method == "POST"
        assert ctx.path == "/users"
        assert ctx.params == {}
        assert ctx.query["page"] == "2"
        assert ctx.body is NO_BODY
        assert ctx.state == {}
        assert ctx.response_sent is False

    def test_headers_shortcut(self, make_context) -> None:
        ctx = make_context(headers={"Authorization": "Bearer t"})
        assert ctx.headers["authorization"] == "Bearer t"

    def test_repr(self, make_context) -> None:
        assert repr(make_context("GET", "/x")) == "<RequestContext GET /x sent=False>"


class TestSendFamily:
    def test_send_json(self, make_context) -> None:
        ctx = make_context()
        ctx.send_json({"ok": True}, 201)
        assert ctx.response_sent is True
        assert ctx.response.status == 201
        assert ctx.response.content_type == "application/json"
        assert ctx.response.json() == {"ok": True}

    def test_send_text(self, make_context) -> None:
        ctx = make_context()
        ctx.send_text("hello")
        assert ctx.response.content_type == "text/plain; charset=utf-8"
        assert ctx.response.text == "hello"

    def test_send_html(self, make_context) -> None:
        ctx = make_context()
        ctx.send_html("<p>hi</p>", 202)
        assert ctx.response.content_type == "text/html; charset=utf-8"
        assert ctx.response.status == 202

    def test_redirect(self, make_context) -> None:
        ctx = make_context()
        ctx.redirect("/login")
        assert ctx.response.status == 302
        assert ctx.response.header("Location") == "/login"
        assert ctx.response.content_type is None

    def test_second_send_wins_with_warning(self, make_context, caplog) -> None:
        ctx = make_context()
        ctx.send_json({"first": 1})
        with caplog.at_level(logging.WARNING, logger="wren.server"):
            ctx.send_json({"second": 2}, 400)
        assert ctx.response.json() == {"second": 2}
        assert "already sent" in caplog.text


class TestFinalResponse:
    def test_nothing_sent_is_empty_204(self, make_context) -> None:
        response = make_context().final_response()
        assert response.status == 204
        assert response.body == b""
        assert response.content_type is None

    def test_staged_headers_prepended(self, make_context) -> None:
        ctx = make_context()
        ctx.set_header("X-Request-ID", "abc")
        ctx.respond(Response("ok").with_header("X-Own", "1"))
        response = ctx.final_response()
        assert response.headers == (("X-Request-ID", "abc"), ("X-Own", "1"))

    def test_staged_headers_on_empty_response(self, make_context) -> None:
        ctx = make_context()
        ctx.set_header("X-Trace", "t")
        assert ctx.final_response().header("x-trace") == "t"


class TestContextVar:
    def test_get_context_outside_request(self) -> None:
        with pytest.raises(LookupError):
            get_context()

    def test_get_context_inside(self, make_context) -> None:
        ctx = make_context()
        token = context_var.set(ctx)
        try:
            assert get_context() is ctx
        finally:
            context_var.reset(token)
