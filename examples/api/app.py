"""JSON API: middleware, error handlers, groups, and static files.

Demonstrates:
- Request-ID and bearer-token middleware (HALT on bad credentials)
- Kind-based error handlers (validation errors vs everything else)
- Route groups with ``:id`` params
- A ``/static/*`` wildcard route serving files from ./public
- CORS, compression, access logging, and rate limiting from AppConfig

Run:
    cd examples/api && python app.py
"""

import logging
import mimetypes
import time
import uuid
from pathlib import Path

from wren import (
    CONTINUE,
    HALT,
    App,
    AppConfig,
    AppError,
    ErrorKind,
    Response,
    ValidationFailure,
)

PUBLIC_DIR = Path(__file__).parent / "public"
DEMO_TOKEN = "demo-token"
STARTED = time.monotonic()

app = App(
    AppConfig(
        logging=True,
        cors=True,
        compression=True,
        rate_limit=True,
        rate_max_requests=100,
        rate_window_ms=60_000,
    )
)


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


@app.use
def request_id(ctx):
    ctx.state["request_id"] = uuid.uuid4().hex
    ctx.set_header("X-Request-ID", ctx.state["request_id"])
    return CONTINUE


@app.use
def require_token(ctx):
    """Bearer auth for everything outside /public and /static."""
    if ctx.path.startswith(("/public", "/static")):
        return CONTINUE

    auth = ctx.headers.get("authorization", "")
    if not auth.startswith("Bearer "):
        ctx.send_json({"error": "Unauthorized", "code": "AUTH_REQUIRED"}, 401)
        return HALT
    if auth.removeprefix("Bearer ") != DEMO_TOKEN:
        ctx.send_json({"error": "Invalid token", "code": "INVALID_TOKEN"}, 401)
        return HALT

    ctx.state["user"] = {"id": "123", "name": "Demo User"}
    return CONTINUE


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


@app.on_error
def validation_errors(error: AppError, ctx) -> bool:
    if error.kind is not ErrorKind.VALIDATION:
        return False
    ctx.send_json({"error": error.message, "details": dict(error.details)}, error.status)
    return True


@app.on_error
def everything_else(error: AppError, ctx) -> bool:
    logging.getLogger(__name__).error("Error [%s]: %s", ctx.state.get("request_id"), error)
    ctx.send_json({"error": "Internal server error", "requestId": ctx.state.get("request_id")}, 500)
    return True


# ---------------------------------------------------------------------------
# Public routes
# ---------------------------------------------------------------------------


def public_routes(public) -> None:
    public.get(
        "/status",
        lambda ctx: {
            "status": "OK",
            "version": "1.0.0",
            "uptime": round(time.monotonic() - STARTED, 3),
        },
    )
    public.get("/docs", lambda ctx: ctx.send_html("<h1>API docs</h1><p>GET /api/users</p>"))


app.group("/public", public_routes)


# ---------------------------------------------------------------------------
# User routes
# ---------------------------------------------------------------------------

USERS = [
    {"id": "1", "name": "Alice", "email": "alice@example.com"},
    {"id": "2", "name": "Bob", "email": "bob@example.com"},
]

users = app.group("/api/users")


@users.get("")
def list_users(ctx):
    ctx.send_json({"users": USERS})


@users.get("/:id")
def show_user(ctx):
    ctx.send_json({"user": {"id": ctx.params["id"], "name": "Example User"}})


@users.post("")
def create_user(ctx):
    body = ctx.body if isinstance(ctx.body, dict) else {}
    name, email = body.get("name"), body.get("email")
    if not name or not email:
        raise ValidationFailure(
            "Validation failed",
            {
                "fields": {
                    "name": None if name else "Name is required",
                    "email": None if email else "Email is required",
                }
            },
        )
    ctx.send_json({"user": {"id": uuid.uuid4().hex, "name": name, "email": email}}, 201)


@users.put("/:id")
def update_user(ctx):
    body = ctx.body if isinstance(ctx.body, dict) else {}
    return {
        "user": {
            "id": ctx.params["id"],
            "name": body.get("name", "Default Name"),
            "email": body.get("email", "default@example.com"),
        }
    }


@users.delete("/:id")
def delete_user(ctx):
    return {"success": True, "message": f"User {ctx.params['id']} deleted"}


@users.get("/:id/explode")
def explode(ctx):
    raise RuntimeError(f"user {ctx.params['id']} exploded")


# ---------------------------------------------------------------------------
# Static files
# ---------------------------------------------------------------------------


@app.get("/static/*")
def static_files(ctx):
    root = PUBLIC_DIR.resolve()
    target = (root / ctx.params["wildcard"].lstrip("/")).resolve()
    if not target.is_relative_to(root) or not target.is_file():
        ctx.send_json({"error": "File not found"}, 404)
        return
    content_type, _ = mimetypes.guess_type(target.name)
    ctx.respond(Response(target.read_bytes(), content_type=content_type or "application/octet-stream"))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run()
