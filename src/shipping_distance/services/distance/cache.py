"""In-process cache for distance lookups.

Keys are MD5 fingerprints over every input that can change a lookup result
(origin, destination, package contents and the effective method settings),
JSON-dumped with ``sort_keys=True`` so mapping order never changes the key.
Entries expire after a TTL; expired entries are treated as misses and purged
on read.
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar

from ...config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def fingerprint(
    origin: Any,
    destination: Any,
    package: Mapping[str, Any] | None,
    method_settings: Mapping[str, Any] | None,
    *,
    prefix: str | None = None,
) -> str:
    """Build a stable cache key for a distance lookup."""
    payload = {
        "origin": origin,
        "destination": destination,
        "package": package or {},
        "settings": method_settings or {},
    }
    blob = json.dumps(payload, sort_keys=True, ensure_ascii=False, default=str)
    digest = hashlib.md5(blob.encode("utf-8")).hexdigest()
    return f"{prefix or settings.method_id}_api_request_{digest}"


class RequestCache(Generic[T]):
    """Thread-safe TTL cache. Reads and writes are atomic per key."""

    def __init__(
        self,
        ttl_seconds: int | None = None,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.cache_ttl_seconds
        self.max_entries = max_entries if max_entries is not None else settings.cache_max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, T]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug("cache: MISS key=%s", key[-12:])
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                logger.debug("cache: EXPIRED key=%s", key[-12:])
                return None
            logger.debug("cache: HIT key=%s", key[-12:])
            return value

    def put(self, key: str, value: T, ttl: int | None = None) -> None:
        lifetime = self.ttl_seconds if ttl is None else ttl
        with self._lock:
            # Drop the previous entry first so the key moves to the newest position.
            self._entries.pop(key, None)
            if lifetime <= 0:
                return
            self._entries[key] = (self._clock() + lifetime, value)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("cache: EVICT key=%s", evicted[-12:])
        logger.debug("cache: SET key=%s ttl=%ss", key[-12:], lifetime)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


request_cache: RequestCache = RequestCache()
