"""
In-memory subscriber registry.

Backs tests and static deployments that pin a fixed set of trusted
participants instead of querying the network registry.
"""

from __future__ import annotations

import logging

from shared.schemas import Subscriber

logger = logging.getLogger(__name__)


class SubscriberStore:
    """In-memory registry of subscribers keyed by (subscriber_id, unique_key_id)."""

    def __init__(self, subscribers: list[Subscriber] | None = None) -> None:
        self._subscribers: dict[tuple[str, str], Subscriber] = {}
        for sub in subscribers or []:
            self.add(sub)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def add(self, subscriber: Subscriber) -> Subscriber:
        self._subscribers[(subscriber.subscriber_id, subscriber.unique_key_id)] = subscriber
        return subscriber

    def register(
        self,
        subscriber_id: str,
        unique_key_id: str,
        signing_public_key: str,
        encryption_public_key: str | None = None,
    ) -> Subscriber:
        record = Subscriber(
            subscriber_id=subscriber_id,
            unique_key_id=unique_key_id,
            signing_public_key=signing_public_key,
            encryption_public_key=encryption_public_key,
        )
        self.add(record)
        logger.info("Registered subscriber %s (key %s)", subscriber_id, unique_key_id)
        return record

    def unregister(self, subscriber_id: str, unique_key_id: str) -> bool:
        key = (subscriber_id, unique_key_id)
        if key in self._subscribers:
            del self._subscribers[key]
            logger.info("Unregistered subscriber %s (key %s)", subscriber_id, unique_key_id)
            return True
        return False

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get(self, subscriber_id: str, unique_key_id: str) -> Subscriber | None:
        return self._subscribers.get((subscriber_id, unique_key_id))

    async def lookup(self, subscriber_id: str, unique_key_id: str) -> Subscriber | None:
        return self.get(subscriber_id, unique_key_id)

    def all_subscribers(self) -> list[Subscriber]:
        return list(self._subscribers.values())
