"""FastAPI dependency injection functions."""

import uuid

from fastapi import Header, Request

from api.config import Settings, get_settings


async def get_settings_dependency() -> Settings:
    """Get application settings."""
    return get_settings()


def get_log_context(
    request: Request,
    x_request_id: str | None = Header(None, description="Request ID for tracing"),
    x_actor_user_id: str | None = Header(None, description="Actor user ID"),
    x_actor_project_id: str | None = Header(None, description="Actor project ID"),
) -> dict[str, str | None]:
    """
    Build logging metadata for a request.

    Reuses the id assigned by the request-id middleware so log lines and
    error responses carry the same value; falls back to the caller's
    X-Request-ID or a fresh one when the middleware is not installed.
    """
    request_id = getattr(request.state, "request_id", None) or x_request_id or uuid.uuid4().hex
    request.state.request_id = request_id
    return {
        "request_id": request_id,
        "user_id": x_actor_user_id,
        "project_id": x_actor_project_id,
    }
