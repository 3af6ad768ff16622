"""
Runtime configuration for the gateway, read from the environment.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from shared.keys import DEFAULT_KEYS_DIR, KEYS_DIR_ENV

HEALTH_PATH = "/health"
INTERNAL_PREFIX = "/internal/"


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class GatewayConfig:
    """Settings the gateway needs before it serves its first request."""

    registry_url: str = ""
    registry_timeout: float = 5.0
    registry_cache_ttl: float = 300.0
    enable_authentication: bool = True
    keys_dir: str = DEFAULT_KEYS_DIR
    health_path: str = HEALTH_PATH
    internal_prefix: str = INTERNAL_PREFIX
    host: str = "127.0.0.1"
    port: int = 8080

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GatewayConfig":
        env = os.environ if environ is None else environ
        return cls(
            registry_url=env.get("REGISTRY_URL", ""),
            registry_timeout=float(env.get("REGISTRY_TIMEOUT", "5")),
            registry_cache_ttl=float(env.get("REGISTRY_CACHE_TTL", "300")),
            enable_authentication=_env_bool(env.get("ENABLE_AUTHENTICATION"), True),
            keys_dir=env.get(KEYS_DIR_ENV, DEFAULT_KEYS_DIR),
            host=env.get("GATEWAY_HOST", "127.0.0.1"),
            port=int(env.get("GATEWAY_PORT", "8080")),
        )
