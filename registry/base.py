"""
Resolver contract consumed by the gateway.

Anything with an async ``lookup(subscriber_id, unique_key_id)`` that
returns a :class:`Subscriber` or *None* can sit behind the gateway.
Retries, caching and timeouts are the resolver's business.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from shared.schemas import Subscriber


@runtime_checkable
class SubscriberResolver(Protocol):

    async def lookup(self, subscriber_id: str, unique_key_id: str) -> Subscriber | None:
        ...


class RegistryLookupError(Exception):
    """Registry could not be reached or answered with garbage."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
