"""Query string parameters.

The mapping is flat: when a key repeats, the last occurrence wins, so
``?a=1&a=2`` reads as ``{"a": "2"}``. ``+`` and percent-escapes are
decoded.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl


class QueryParams(Mapping[str, str]):
    """Read-only view of a parsed query string.

    The undecoded bytes stay on ``_raw`` so the request can rebuild its
    URL exactly as received.
    """

    __slots__ = ("_pairs", "_raw")

    def __init__(self, query_string: bytes | str = b"") -> None:
        raw = query_string.encode("utf-8") if isinstance(query_string, str) else query_string
        self._raw = raw
        self._pairs: dict[str, str] = {}
        for key, value in parse_qsl(raw.decode("utf-8", errors="replace"), keep_blank_values=True):
            self._pairs[key] = value

    def __getitem__(self, key: str) -> str:
        return self._pairs[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __repr__(self) -> str:
        return f"QueryParams({self._pairs!r})"
