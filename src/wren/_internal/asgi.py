"""Raw ASGI type aliases.

Only the dispatcher, request factory, and sender touch these. Users
interact with ``Request``, ``Response``, and ``RequestContext``.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send: TypeAlias = Callable[[MutableMapping[str, Any]], Awaitable[None]]
