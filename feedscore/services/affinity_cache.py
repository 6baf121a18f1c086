"""
Affinity cache: write-once store of AffinitySnapshot per (user_id, snapshot_key).

Entries are never updated in place: a recomputation for the same key keeps the
first stored value, so a reader can never observe a half-replaced entry.
snapshot_key is a data snapshot version, or `now` bucketed via bucket_now().
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

from ..models.scoring import AffinitySnapshot

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str]

DEFAULT_MAX_ENTRIES = 1024


def bucket_now(now: datetime, bucket_seconds: int) -> str:
    """Snapshot key for now floored to a bucket_seconds boundary."""
    if bucket_seconds <= 0:
        return now.isoformat()
    bucket = int(now.timestamp()) // bucket_seconds
    return f"t{bucket * bucket_seconds}"


class AffinityCache:
    """
    Thread-safe, write-once cache of user affinity snapshots.

    Holds at most max_entries keys (None = unbounded); the oldest is evicted first.
    """

    def __init__(self, max_entries: Optional[int] = DEFAULT_MAX_ENTRIES):
        if max_entries is not None and max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self._entries: Dict[CacheKey, AffinitySnapshot] = {}
        self._lock = threading.Lock()
        self._max_entries = max_entries

    def get(self, user_id: str, snapshot_key: str) -> Optional[AffinitySnapshot]:
        with self._lock:
            return self._entries.get((user_id, snapshot_key))

    def put(self, user_id: str, snapshot_key: str, snapshot: AffinitySnapshot) -> AffinitySnapshot:
        """Store snapshot unless the key is taken; return the stored entry."""
        key = (user_id, snapshot_key)
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                return existing
            if self._max_entries is not None and len(self._entries) >= self._max_entries:
                # Evict the oldest entry (dicts keep insertion order)
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            self._entries[key] = snapshot
            return snapshot

    def get_or_compute(
        self,
        user_id: str,
        snapshot_key: str,
        compute: Callable[[], AffinitySnapshot],
    ) -> AffinitySnapshot:
        """Cached snapshot, computing and storing it on a miss."""
        cached = self.get(user_id, snapshot_key)
        if cached is not None:
            logger.debug("[affinity_cache] HIT user_id=%s snapshot_key=%s", user_id, snapshot_key)
            return cached
        logger.debug("[affinity_cache] MISS user_id=%s snapshot_key=%s", user_id, snapshot_key)
        return self.put(user_id, snapshot_key, compute())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
