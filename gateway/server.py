"""
Signed-request gateway – FastAPI application.

On start-up the gateway:
  1. Loads this participant's key material (env first, then ./keys)
  2. Builds the subscriber resolver (network registry or a static store)
  3. Installs the authentication middleware (unless disabled)
  4. Serves /health, /internal/* and the authenticated API

Usage:
    python -m gateway.server
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import Depends, FastAPI

from gateway.auth import RequestAuthenticator
from gateway.config import GatewayConfig
from gateway.middleware import (
    AuthenticationMiddleware,
    AuthenticationRequired,
    authentication_required_handler,
    get_subscriber,
)
from registry.base import SubscriberResolver
from registry.client import RegistryClient
from registry.store import SubscriberStore
from shared.keys import load_keys
from shared.schemas import KeyMaterial, Subscriber

logger = logging.getLogger("gateway")


def build_resolver(config: GatewayConfig) -> SubscriberResolver:
    if config.registry_url:
        return RegistryClient(
            config.registry_url,
            timeout=config.registry_timeout,
            cache_ttl=config.registry_cache_ttl,
        )
    logger.warning("REGISTRY_URL not set – using an empty in-memory subscriber store")
    return SubscriberStore()


def create_app(
    config: GatewayConfig | None = None,
    resolver: SubscriberResolver | None = None,
    keys: KeyMaterial | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or GatewayConfig.from_env()
    if resolver is None:
        resolver = build_resolver(config)
    if keys is None:
        keys = load_keys(config.keys_dir)

    if not keys.has_signing_keys:
        logger.warning("Signing keys not available – outgoing requests cannot be signed")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if isinstance(resolver, RegistryClient):
            await resolver.aclose()

    app = FastAPI(title="Signed-request gateway", lifespan=lifespan)
    app.state.config = config
    app.state.keys = keys
    app.state.resolver = resolver

    if config.enable_authentication:
        authenticator = RequestAuthenticator(
            resolver,
            health_path=config.health_path,
            internal_prefix=config.internal_prefix,
        )
        app.add_middleware(AuthenticationMiddleware, authenticator=authenticator)
        logger.info("Authentication middleware enabled")
    else:
        logger.warning("Authentication middleware is DISABLED – not recommended for production")

    app.add_exception_handler(AuthenticationRequired, authentication_required_handler)

    @app.get(config.health_path)
    async def health():
        return {"status": "ok"}

    @app.get(config.internal_prefix + "keys")
    async def public_keys():
        return {
            "signing_public_key": keys.signing_public_key,
            "encryption_public_key": keys.encryption_public_key,
        }

    @app.get("/api/v1/whoami")
    async def whoami(subscriber: Subscriber = Depends(get_subscriber)):
        return {
            "subscriber_id": subscriber.subscriber_id,
            "unique_key_id": subscriber.unique_key_id,
        }

    return app


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def main():
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    import uvicorn

    config = GatewayConfig.from_env()
    logger.info("Starting gateway on %s:%d…", config.host, config.port)
    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
