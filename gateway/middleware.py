"""
HTTP admission gate.

Wraps the ASGI app, runs :class:`RequestAuthenticator` on every
request and either lets it through (attaching the verified
``Subscriber`` to ``request.state.subscriber``) or answers with the
uniform NACK body and HTTP 401.

Usage:
    app.add_middleware(AuthenticationMiddleware, authenticator=authenticator)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from gateway.auth import RequestAuthenticator
from shared.schemas import NackResponse, Subscriber, VerificationStatus

logger = logging.getLogger(__name__)

UNAUTHORIZED = 401


def nack_response(reason: str, status_code: int = UNAUTHORIZED) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=NackResponse.build(status_code, reason).to_dict(),
    )


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Admits verified or bypassed requests; rejects everything else."""

    def __init__(self, app: ASGIApp, authenticator: RequestAuthenticator) -> None:
        super().__init__(app)
        self._authenticator = authenticator

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        path = request.url.path
        if self._authenticator.is_bypassed(path):
            return await call_next(request)

        # Exact wire bytes; the digest must never see re-serialised JSON.
        body = await request.body()
        outcome = await self._authenticator.authenticate(
            path, request.headers.get("authorization"), body
        )

        if outcome.status == VerificationStatus.VERIFIED:
            request.state.subscriber = outcome.subscriber
            return await call_next(request)
        if outcome.status == VerificationStatus.BYPASSED:
            return await call_next(request)

        return nack_response(outcome.message)


# ---------------------------------------------------------------------------
# Downstream access to the verified identity
# ---------------------------------------------------------------------------

class AuthenticationRequired(Exception):
    """Raised by :func:`get_subscriber` when no identity was attached."""


def get_subscriber(request: Request) -> Subscriber:
    """FastAPI dependency returning the authenticated subscriber."""
    subscriber = getattr(request.state, "subscriber", None)
    if subscriber is None:
        raise AuthenticationRequired()
    return subscriber


async def authentication_required_handler(
    request: Request, exc: AuthenticationRequired
) -> JSONResponse:
    logger.warning("No authenticated subscriber on %s", request.url.path)
    return nack_response("Authentication required")
