"""Tests for wren.middleware: Flow results and the MiddlewareChain."""

import pytest

from wren.middleware.chain import MiddlewareChain
from wren.middleware.protocol import CONTINUE, HALT, Flow


class TestFlowOf:
    @pytest.mark.parametrize("result", [None, True, CONTINUE, "anything", 0])
    def test_continue_values(self, result: object) -> None:
        assert Flow.of(result) is Flow.CONTINUE

    @pytest.mark.parametrize("result", [False, HALT])
    def test_halt_values(self, result: object) -> None:
        assert Flow.of(result) is Flow.HALT


class TestMiddlewareChain:
    async def test_empty_chain_continues(self, make_context) -> None:
        assert await MiddlewareChain().run(make_context()) is Flow.CONTINUE

    async def test_runs_in_order(self, make_context) -> None:
        seen: list[str] = []

        def first(ctx) -> None:
            seen.append("first")

        async def second(ctx) -> Flow:
            seen.append("second")
            return CONTINUE

        chain = MiddlewareChain((first, second))
        assert await chain.run(make_context()) is Flow.CONTINUE
        assert seen == ["first", "second"]
        assert len(chain) == 2

    async def test_halt_stops_the_chain(self, make_context) -> None:
        seen: list[str] = []

        def gate(ctx) -> Flow:
            seen.append("gate")
            ctx.send_json({"error": "Unauthorized"}, 401)
            return HALT

        def after(ctx) -> None:
            seen.append("after")

        ctx = make_context()
        assert await MiddlewareChain((gate, after)).run(ctx) is Flow.HALT
        assert seen == ["gate"]
        assert ctx.response.status == 401

    async def test_false_halts(self, make_context) -> None:
        chain = MiddlewareChain((lambda ctx: False, lambda ctx: pytest.fail("ran")))
        assert await chain.run(make_context()) is Flow.HALT

    async def test_state_flows_between_middleware(self, make_context) -> None:
        def tag(ctx) -> None:
            ctx.state["user"] = "ada"

        def read(ctx) -> None:
            ctx.state["greeting"] = f"hi {ctx.state['user']}"

        ctx = make_context()
        await MiddlewareChain((tag, read)).run(ctx)
        assert ctx.state["greeting"] == "hi ada"

    async def test_class_middleware(self, make_context) -> None:
        class Counter:
            def __init__(self) -> None:
                self.calls = 0

            async def __call__(self, ctx) -> Flow:
                self.calls += 1
                return CONTINUE

        counter = Counter()
        await MiddlewareChain((counter,)).run(make_context())
        assert counter.calls == 1

    async def test_exceptions_propagate(self, make_context) -> None:
        def broken(ctx) -> None:
            raise RuntimeError("broken middleware")

        with pytest.raises(RuntimeError, match="broken middleware"):
            await MiddlewareChain((broken,)).run(make_context())
