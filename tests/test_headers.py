"""Tests for wren.http.headers: immutable, case-insensitive Headers."""

import pytest

from wren.http.headers import Headers


def _h(*pairs: tuple[str, str]) -> Headers:
    """Shorthand: build Headers from string pairs."""
    raw = tuple((k.encode("latin-1"), v.encode("latin-1")) for k, v in pairs)
    return Headers(raw)


class TestHeaders:
    def test_getitem(self) -> None:
        h = _h(("Content-Type", "application/json"))
        assert h["Content-Type"] == "application/json"

    def test_case_insensitive(self) -> None:
        h = _h(("Content-Type", "application/json"))
        assert h["content-type"] == "application/json"
        assert h["CONTENT-TYPE"] == "application/json"

    def test_missing_key_raises(self) -> None:
        h = _h(("Accept", "*/*"))
        with pytest.raises(KeyError):
            h["X-Missing"]

    def test_contains(self) -> None:
        h = _h(("Accept", "*/*"))
        assert "accept" in h
        assert "Accept" in h
        assert "x-missing" not in h
        assert 42 not in h  # type: ignore[operator]

    def test_first_value_wins(self) -> None:
        h = _h(("X-Forwarded-For", "10.0.0.1"), ("X-Forwarded-For", "10.0.0.2"))
        assert h["x-forwarded-for"] == "10.0.0.1"
        assert h.get_list("x-forwarded-for") == ["10.0.0.1", "10.0.0.2"]

    def test_iter_yields_unique_lowercase_keys(self) -> None:
        h = _h(("Accept", "*/*"), ("Content-Type", "text/plain"), ("Accept", "text/xml"))
        assert list(h) == ["accept", "content-type"]
        assert len(h) == 2

    def test_get_with_default(self) -> None:
        h = _h(("Accept", "*/*"))
        assert h.get("accept") == "*/*"
        assert h.get("x-missing") is None
        assert h.get("x-missing", "fallback") == "fallback"

    def test_from_dict(self) -> None:
        h = Headers.from_dict({"Authorization": "Bearer abc"})
        assert h["authorization"] == "Bearer abc"
        assert h.raw == ((b"authorization", b"Bearer abc"),)

    def test_empty_headers(self) -> None:
        h = Headers()
        assert len(h) == 0
        assert list(h) == []

    def test_repr(self) -> None:
        assert "accept" in repr(_h(("Accept", "*/*")))
