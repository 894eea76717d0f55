"""
Tests for the session overlay stores.
"""

import json
from unittest.mock import Mock, patch

from app.config import SessionStoreBackend, settings
from services.session_store import (
    InMemorySessionPreferenceStore,
    RedisSessionPreferenceStore,
    build_session_store,
)
from test_fixtures import FakeClock, ONE_HOUR


# =============================================================================
# IN-MEMORY STORE
# =============================================================================


def test_memory_store_round_trip():
    store = InMemorySessionPreferenceStore(ttl_seconds=ONE_HOUR, clock=FakeClock())
    store.set("s1", {"tone": "casual"})

    assert store.get("s1") == {"tone": "casual"}
    assert store.get("other") is None


def test_memory_store_returns_copies():
    store = InMemorySessionPreferenceStore(ttl_seconds=ONE_HOUR, clock=FakeClock())
    store.set("s1", {"tone": "casual"})

    store.get("s1")["tone"] = "formal"
    assert store.get("s1") == {"tone": "casual"}


def test_memory_store_expires_and_evicts():
    """
    Verifies:
    - An entry exactly at the TTL is still readable
    - Past the TTL it reads as missing and is evicted
    """
    clock = FakeClock()
    store = InMemorySessionPreferenceStore(ttl_seconds=ONE_HOUR, clock=clock)
    store.set("s1", {"language": "es"})

    clock.advance(ONE_HOUR)
    assert store.get("s1") is not None

    clock.advance(1)
    assert store.get("s1") is None
    assert len(store) == 0


def test_memory_store_set_restarts_lifetime():
    clock = FakeClock()
    store = InMemorySessionPreferenceStore(ttl_seconds=ONE_HOUR, clock=clock)
    store.set("s1", {"tone": "casual"})
    clock.advance(50 * 60)
    store.set("s1", {"tone": "formal"})
    clock.advance(50 * 60)

    assert store.get("s1") == {"tone": "formal"}


def test_memory_store_delete():
    store = InMemorySessionPreferenceStore(ttl_seconds=ONE_HOUR)
    store.set("s1", {})
    assert store.delete("s1") is True
    assert store.delete("s1") is False


# =============================================================================
# REDIS STORE
# =============================================================================


def test_redis_store_uses_key_ttl():
    client = Mock()
    store = RedisSessionPreferenceStore(client, ttl_seconds=ONE_HOUR)

    store.set("abc", {"aiModel": "anthropic"})

    client.set.assert_called_once_with(
        "session_prefs:abc", json.dumps({"aiModel": "anthropic"}), ex=ONE_HOUR
    )


def test_redis_store_get_decodes_json():
    client = Mock()
    client.get.return_value = json.dumps({"tone": "formal"})
    store = RedisSessionPreferenceStore(client, ttl_seconds=ONE_HOUR)

    assert store.get("abc") == {"tone": "formal"}
    client.get.assert_called_once_with("session_prefs:abc")


def test_redis_store_missing_key():
    client = Mock()
    client.get.return_value = None
    client.delete.return_value = 0
    store = RedisSessionPreferenceStore(client, ttl_seconds=ONE_HOUR)

    assert store.get("abc") is None
    assert store.delete("abc") is False


# =============================================================================
# FACTORY
# =============================================================================


def test_build_session_store_defaults_to_memory():
    assert isinstance(build_session_store(), InMemorySessionPreferenceStore)


def test_build_session_store_redis_backend():
    with patch.object(settings, "session_store_backend", SessionStoreBackend.REDIS), \
            patch.object(RedisSessionPreferenceStore, "from_url") as from_url:
        build_session_store()

    from_url.assert_called_once_with(settings.redis_url, settings.session_ttl_seconds)
