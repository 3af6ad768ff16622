"""Tests for registry.store – in-memory subscriber registry."""

import asyncio

from registry.base import SubscriberResolver
from registry.store import SubscriberStore
from shared.schemas import Subscriber


def test_register_and_lookup():
    store = SubscriberStore()
    rec = store.register("buyer.example.com", "uk-1", "a" * 44)
    assert rec.subscriber_id == "buyer.example.com"
    assert store.get("buyer.example.com", "uk-1") == rec
    assert asyncio.run(store.lookup("buyer.example.com", "uk-1")) == rec


def test_lookup_requires_matching_key_id():
    store = SubscriberStore()
    store.register("buyer.example.com", "uk-1", "a" * 44)
    assert asyncio.run(store.lookup("buyer.example.com", "uk-2")) is None
    assert asyncio.run(store.lookup("other.example.com", "uk-1")) is None


def test_unregister():
    store = SubscriberStore()
    store.register("buyer.example.com", "uk-1", "a" * 44)
    assert store.unregister("buyer.example.com", "uk-1") is True
    assert store.get("buyer.example.com", "uk-1") is None


def test_unregister_nonexistent():
    store = SubscriberStore()
    assert store.unregister("buyer.example.com", "uk-1") is False


def test_seeded_store():
    subs = [
        Subscriber(subscriber_id="a", unique_key_id="1", signing_public_key="k1"),
        Subscriber(subscriber_id="b", unique_key_id="2", signing_public_key="k2"),
    ]
    store = SubscriberStore(subs)
    assert len(store.all_subscribers()) == 2


def test_satisfies_resolver_protocol():
    assert isinstance(SubscriberStore(), SubscriberResolver)
