"""
HTTP client for the network registry's ``/lookup`` endpoint.

Request::

    POST {registry_url}/lookup
    {"subscriber_id": "...", "ukId": "..."}

Response: a JSON list of registry entries; the first one carrying a
``signing_public_key`` whose ``subscriber_id`` / ``ukId`` (when present)
match the request is used.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from registry.base import RegistryLookupError
from shared.schemas import Subscriber

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_CACHE_TTL_SECONDS = 300.0


class RegistryClient:
    """Resolves subscribers against a remote registry, with a small TTL cache."""

    def __init__(
        self,
        registry_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        cache_ttl: float = DEFAULT_CACHE_TTL_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._registry_url = registry_url.rstrip("/")
        self._timeout = timeout
        self._cache_ttl = cache_ttl
        self._client = client
        # key = (subscriber_id, unique_key_id) -> (expires_at, subscriber)
        self._cache: dict[tuple[str, str], tuple[float, Subscriber]] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def clear_cache(self) -> None:
        self._cache.clear()

    def _prune_cache(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._cache.items() if expires_at <= now]
        for k in expired:
            del self._cache[k]

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    async def lookup(self, subscriber_id: str, unique_key_id: str) -> Subscriber | None:
        """
        Fetch the subscriber's published keys.

        Returns *None* when the registry has no usable entry.  Raises
        :class:`RegistryLookupError` on transport failures and timeouts.
        """
        key = (subscriber_id, unique_key_id)
        cached = self._cache.get(key)
        if cached is not None:
            if cached[0] > time.monotonic():
                return cached[1]
            del self._cache[key]

        payload = {"subscriber_id": subscriber_id, "ukId": unique_key_id}
        try:
            response = await self._get_client().post(
                f"{self._registry_url}/lookup",
                json=payload,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            raise RegistryLookupError(f"Registry lookup timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise RegistryLookupError(f"Registry lookup failed: {exc}") from exc

        if response.status_code >= 400:
            logger.warning(
                "Registry returned %d for %s (key %s)",
                response.status_code, subscriber_id, unique_key_id,
            )
            return None

        try:
            entries = response.json()
        except ValueError:
            logger.warning("Registry returned a non-JSON body")
            return None

        subscriber = _subscriber_from_entries(entries, subscriber_id, unique_key_id)
        if subscriber is not None and self._cache_ttl > 0:
            now = time.monotonic()
            self._prune_cache(now)
            self._cache[key] = (now + self._cache_ttl, subscriber)
        return subscriber


def _subscriber_from_entries(
    entries: Any,
    subscriber_id: str,
    unique_key_id: str,
) -> Subscriber | None:
    if isinstance(entries, dict):
        entries = [entries]
    if not isinstance(entries, list):
        return None

    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("signing_public_key"):
            continue
        # Entries naming another subscriber or key id never stand in for the requested one.
        entry_subscriber = entry.get("subscriber_id")
        entry_key_id = entry.get("ukId") or entry.get("unique_key_id")
        if entry_subscriber and entry_subscriber != subscriber_id:
            continue
        if entry_key_id and entry_key_id != unique_key_id:
            continue
        return Subscriber(
            subscriber_id=subscriber_id,
            unique_key_id=unique_key_id,
            signing_public_key=entry["signing_public_key"],
            encryption_public_key=entry.get("encr_public_key"),
            valid_until=entry.get("valid_until"),
        )
    return None
