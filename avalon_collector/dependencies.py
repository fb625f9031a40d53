# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""FastAPI dependencies extracting credentials from requests."""

from typing import Optional

from fastapi import Header, Request

from avalon_auth import ServiceIdentity, UserIdentity

from .context import CollectorContext
from .errors import Unauthenticated

MISSING_API_KEY = "API Key is required. Please provide a valid API Key in the X-API-Key header."
INVALID_API_KEY = "Invalid or inactive API Key."
MISSING_AUTHORIZATION = "No authorization header provided"
MALFORMED_AUTHORIZATION = "Invalid authorization header format. Expected: Bearer <token>"
INVALID_TOKEN = "Invalid or expired token"


def get_context(request: Request) -> CollectorContext:
    return request.app.state.collector


async def require_service_identity(
    request: Request,
    x_api_key: Optional[str] = Header(default=None),
) -> ServiceIdentity:
    """Resolve the ``X-API-Key`` header to the reporting service."""
    context = get_context(request)
    if not x_api_key:
        context.metrics.increment("auth_failures_total", tags={"kind": "api_key_missing"})
        raise Unauthenticated(MISSING_API_KEY)

    identity = await context.gate.resolve_service_identity(x_api_key)
    if identity is None:
        context.metrics.increment("auth_failures_total", tags={"kind": "api_key_invalid"})
        context.logger.warning("Rejected API key", path=request.url.path)
        raise Unauthenticated(INVALID_API_KEY)
    return identity


def parse_bearer(authorization: str) -> Optional[str]:
    """Return the token of a ``Bearer <token>`` header, or None if malformed."""
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        return None
    return parts[1]


async def require_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> UserIdentity:
    """Resolve the ``Authorization: Bearer`` header to an administrator."""
    context = get_context(request)
    if not authorization:
        context.metrics.increment("auth_failures_total", tags={"kind": "token_missing"})
        raise Unauthenticated(MISSING_AUTHORIZATION)

    token = parse_bearer(authorization)
    if token is None:
        context.metrics.increment("auth_failures_total", tags={"kind": "token_malformed"})
        raise Unauthenticated(MALFORMED_AUTHORIZATION)

    identity = context.gate.resolve_user_identity(token)
    if identity is None:
        context.metrics.increment("auth_failures_total", tags={"kind": "token_invalid"})
        raise Unauthenticated(INVALID_TOKEN)
    return identity


async def guard_error_routes(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> Optional[UserIdentity]:
    """Require a session on the error management routes when configured to."""
    if not get_context(request).config.protect_error_routes:
        return None
    return await require_user(request, authorization)
