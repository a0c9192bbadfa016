"""Short-TTL memoization of query results.

Entries are keyed by a fingerprint of the full query input and expire after
a fixed TTL. There is no invalidation on writes; staleness is bounded by the
TTL. A TTL of 0 disables caching without changing any result.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 120.0
DEFAULT_MAX_ENTRIES = 1024


def fingerprint(operation: str, tenant_id: str, **inputs: Any) -> str:
    """Deterministic cache key for a query.

    The inputs are serialized as canonical JSON (sorted keys, no whitespace)
    and hashed, so equal inputs give equal keys regardless of argument order.
    """
    payload = json.dumps(
        {"op": operation, "tenant": tenant_id, "inputs": inputs},
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class QueryCache:
    """In-process TTL cache shared by all requests of one service.

    Only touched from the event loop thread, so a plain ordered dict is
    enough; concurrent writers for a fingerprint store equivalent results
    and the last one wins.

    Attributes:
        ttl_seconds: Entry lifetime. 0 disables the cache.
        max_entries: Oldest entries are evicted beyond this size.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must not be negative")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max(1, max_entries)
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, Any]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def get(self, key: str) -> Optional[Any]:
        """Return the cached result, or None on a miss or expired entry."""
        if not self.enabled:
            self.misses += 1
            return None

        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            self.misses += 1
            return None

        self.hits += 1
        return value

    def put(self, key: str, value: Any) -> None:
        """Store a result under key, evicting the oldest entries if full."""
        if not self.enabled:
            return

        self._entries[key] = (self._clock(), value)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Query cache full, evicted {evicted[:12]}")

    def clear(self) -> None:
        """Drop every entry (service shutdown)."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
