"""
Read-through caching for aggregated alert fetches.

Implements:
- A small cache capability (get/put with TTL) with in-memory, file and
  disabled backends
- fetch_with_cache: serve a fixed key from cache, or run the producer and
  store its result

Caching is best effort. Backend failures and corrupt entries are logged and
treated as misses; nothing is invalidated except by TTL expiry. Each entry
records a fingerprint of the inputs that produced it (query, lookback
window, sheet name); an entry built for other inputs is a miss.
"""

import hashlib
import json
import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Awaitable, Callable, Optional, Protocol

from pydantic import BaseModel, Field, ValidationError

from alert_review.models.alert import AggregatedAlert

logger = logging.getLogger(__name__)

# Fixed logical keys, one per source
EMAIL_ALERTS_KEY = "emailAlerts"
PAGING_INCIDENTS_KEY = "pagingIncidents"
SPREADSHEET_ALERTS_KEY = "spreadsheetAlerts"

DEFAULT_TTL_SECONDS = 6 * 60 * 60


class CacheEntry(BaseModel):
    """Stored value of one cache key."""

    fingerprint: str = Field(default="", description="Inputs the alerts were produced from")
    alerts: list[AggregatedAlert] = Field(default_factory=list)


class Cache(Protocol):
    """Cache capability injected into collectors."""

    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        ...


class NullCache:
    """Disabled cache: every read misses, every write is dropped."""

    def get(self, key: str) -> Optional[str]:
        return None

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        return None


class InMemoryCache:
    """
    Process-local cache with per-entry TTL.

    Bounded by ``max_size``; when full the oldest entry is evicted.
    """

    def __init__(self, max_size: int = 100, clock: Callable[[], float] = time.time):
        self.max_size = max_size
        self._clock = clock
        self._entries: dict[str, dict] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        """Retrieve item from cache if valid."""
        with self._lock:
            item = self._entries.get(key)
            if item is None:
                return None
            if self._clock() >= item["expires_at"]:
                del self._entries[key]  # Expired
                return None
            return item["value"]

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """Add item to cache with eviction policy."""
        now = self._clock()
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_size:
                oldest_key = min(self._entries, key=lambda k: self._entries[k]["stored_at"])
                del self._entries[oldest_key]

            self._entries[key] = {
                "value": value,
                "stored_at": now,
                "expires_at": now + ttl_seconds,
            }


class FileCache:
    """
    Cache backed by one JSON file per key.

    Lets the TTL span separate CLI runs (one report pass per process).
    """

    def __init__(self, directory: Path | str, clock: Callable[[], float] = time.time):
        self.directory = Path(directory)
        self._clock = clock

    def _path_for(self, key: str) -> Path:
        digest = hashlib.md5(key.encode("utf-8")).hexdigest()
        return self.directory / f"{digest}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None

        with path.open("r", encoding="utf-8") as fp:
            item = json.load(fp)

        if self._clock() >= float(item["expires_at"]):
            path.unlink(missing_ok=True)
            return None
        return item["value"]

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        item = {
            "key": key,
            "value": value,
            "expires_at": self._clock() + ttl_seconds,
        }

        # Write to a sibling temp file first so readers never see a partial entry
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                json.dump(item, fp)
            os.replace(tmp_name, self._path_for(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def serialize_entry(alerts: list[AggregatedAlert], fingerprint: str = "") -> str:
    return CacheEntry(fingerprint=fingerprint, alerts=alerts).model_dump_json()


def deserialize_entry(payload: str) -> CacheEntry:
    return CacheEntry.model_validate_json(payload)


def _read_cached(cache: Cache, key: str, fingerprint: str) -> Optional[list[AggregatedAlert]]:
    """Cached alerts for ``key``; None on a miss, a backend error, a corrupt entry
    or an entry produced from other inputs."""
    try:
        cached = cache.get(key)
    except Exception as e:
        logger.warning(f"Cache read failed for {key}, fetching: {e}")
        return None

    if cached is None:
        logger.debug(f"Cache miss for {key}")
        return None

    try:
        entry = deserialize_entry(cached)
    except (ValidationError, TypeError) as e:
        logger.warning(f"Discarding corrupt cache entry for {key}: {e}")
        return None

    if entry.fingerprint != fingerprint:
        logger.info(f"Cache entry for {key} was built for {entry.fingerprint!r}, fetching for {fingerprint!r}")
        return None

    logger.debug(f"Cache hit for {key} ({len(entry.alerts)} alerts)")
    return entry.alerts


def _store(cache: Cache, key: str, ttl_seconds: int, alerts: list[AggregatedAlert], fingerprint: str) -> None:
    try:
        cache.put(key, serialize_entry(alerts, fingerprint), ttl_seconds)
    except Exception as e:
        logger.warning(f"Cache write failed for {key}: {e}")


def fetch_with_cache(
    cache: Cache,
    key: str,
    ttl_seconds: int,
    producer: Callable[[], list[AggregatedAlert]],
    fingerprint: str = "",
) -> list[AggregatedAlert]:
    """
    Return the cached alerts for ``key`` or produce and cache them.

    Args:
        cache: Cache capability.
        key: Fixed logical key of the source.
        ttl_seconds: Lifetime of a newly stored entry.
        producer: Performs the actual fetch; only called on a miss.
        fingerprint: Inputs of the fetch; a stored entry only hits when they match.

    Returns:
        Aggregated alerts, from cache or freshly produced.

    Raises:
        Whatever the producer raises. Failed fetches are never cached.
    """
    alerts = _read_cached(cache, key, fingerprint)
    if alerts is not None:
        return alerts

    alerts = producer()
    _store(cache, key, ttl_seconds, alerts, fingerprint)
    return alerts


async def afetch_with_cache(
    cache: Cache,
    key: str,
    ttl_seconds: int,
    producer: Callable[[], Awaitable[list[AggregatedAlert]]],
    fingerprint: str = "",
) -> list[AggregatedAlert]:
    """Async variant of fetch_with_cache for coroutine producers."""
    alerts = _read_cached(cache, key, fingerprint)
    if alerts is not None:
        return alerts

    alerts = await producer()
    _store(cache, key, ttl_seconds, alerts, fingerprint)
    return alerts


def build_cache(enabled: bool, backend: str, directory: str) -> Cache:
    """Cache backend selected by configuration."""
    if not enabled:
        return NullCache()
    if backend == "memory":
        return InMemoryCache()
    return FileCache(directory)
