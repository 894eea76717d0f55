"""
Session preference overlay stores.

A session overlay is a partial preference mapping keyed by session id that
expires after a fixed lifetime. The preference service only talks to the
``SessionPreferenceStore`` interface, so the process-local store can be
swapped for Redis when several API instances run side by side.
"""

import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple

from redis import Redis

from app.config import settings, SessionStoreBackend

logger = logging.getLogger("newsplatform.session_store")

Overlay = Dict[str, Any]


class SessionPreferenceStore(ABC):
    """Key-value store for session overlays with a fixed time-to-live"""

    def __init__(self, ttl_seconds: int):
        self.ttl_seconds = ttl_seconds

    @abstractmethod
    def get(self, session_id: str) -> Optional[Overlay]:
        """Return the overlay, or None if it is absent or expired"""

    @abstractmethod
    def set(self, session_id: str, overlay: Overlay) -> None:
        """Store (or replace) the overlay and restart its lifetime"""

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        """Remove the overlay. True if something was removed"""


class InMemorySessionPreferenceStore(SessionPreferenceStore):
    """
    Process-local store.

    Entries older than ``ttl_seconds`` are treated as missing and evicted
    the next time they are read. ``clock`` returns seconds and can be
    replaced in tests to simulate ageing.
    """

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.time):
        super().__init__(ttl_seconds)
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Overlay]] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[Overlay]:
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                return None
            stored_at, overlay = entry
            if self._clock() - stored_at > self.ttl_seconds:
                del self._entries[session_id]
                logger.info(f"session_overlay_expired session_id={session_id}")
                return None
            return dict(overlay)

    def set(self, session_id: str, overlay: Overlay) -> None:
        with self._lock:
            self._entries[session_id] = (self._clock(), dict(overlay))

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._entries.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._entries)


class RedisSessionPreferenceStore(SessionPreferenceStore):
    """Shared store backed by Redis; expiry is delegated to the key TTL"""

    KEY_PREFIX = "session_prefs:"

    def __init__(self, client, ttl_seconds: int):
        super().__init__(ttl_seconds)
        self.client = client

    @classmethod
    def from_url(cls, url: str, ttl_seconds: int) -> "RedisSessionPreferenceStore":
        client = Redis.from_url(url, decode_responses=True, socket_connect_timeout=5)
        return cls(client, ttl_seconds)

    def _key(self, session_id: str) -> str:
        return f"{self.KEY_PREFIX}{session_id}"

    def get(self, session_id: str) -> Optional[Overlay]:
        raw = self.client.get(self._key(session_id))
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, session_id: str, overlay: Overlay) -> None:
        self.client.set(self._key(session_id), json.dumps(overlay), ex=self.ttl_seconds)

    def delete(self, session_id: str) -> bool:
        return bool(self.client.delete(self._key(session_id)))


def build_session_store() -> SessionPreferenceStore:
    """Create the store selected by settings"""
    ttl = settings.session_ttl_seconds
    if settings.session_store_backend == SessionStoreBackend.REDIS:
        logger.info(f"session_store_init backend=redis ttl={ttl}")
        return RedisSessionPreferenceStore.from_url(settings.redis_url, ttl)
    logger.info(f"session_store_init backend=memory ttl={ttl}")
    return InMemorySessionPreferenceStore(ttl)
