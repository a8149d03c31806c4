"""Application configuration.

AppConfig is a frozen dataclass built once at startup. Every knob the
dispatcher reads lives here, so nothing is looked up by string key.
"""

from dataclasses import dataclass

from wren.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(cors=True, compression=True, rate_limit=True)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # CORS: permissive headers on every response, 204 for preflight
    cors: bool = False
    cors_allow_origin: str = "*"
    cors_allow_methods: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS")
    cors_allow_headers: tuple[str, ...] = ("Content-Type", "Authorization", "X-Requested-With")

    # Request/response trace lines on the "wren.access" logger
    logging: bool = False

    # Negotiated response compression (gzip > deflate > identity)
    compression: bool = False
    compression_level: int = 6

    # Fixed-window rate limiting per client
    rate_limit: bool = False
    rate_window_ms: int = 60_000
    rate_max_requests: int = 100
    rate_limit_key_header: str | None = None  # e.g. "x-forwarded-for" behind a proxy

    def validate(self) -> None:
        """Raise ``ConfigurationError`` for values the dispatcher cannot honor."""
        if self.rate_window_ms <= 0:
            msg = f"rate_window_ms must be positive, got {self.rate_window_ms}"
            raise ConfigurationError(msg)
        if self.rate_max_requests <= 0:
            msg = f"rate_max_requests must be positive, got {self.rate_max_requests}"
            raise ConfigurationError(msg)
        if not 0 <= self.compression_level <= 9:
            msg = f"compression_level must be between 0 and 9, got {self.compression_level}"
            raise ConfigurationError(msg)
