"""
In-memory schema cache

Maps a dataset id to its schema with a time-to-live. Expired entries are
evicted lazily by the lookup that notices them; there is no background sweep.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from datasf_mcp.logging import cache_logger as logger

from .models import DatasetSchema

DEFAULT_TTL_SECONDS = 5 * 60


@dataclass(frozen=True)
class CacheEntry:
    schema: DatasetSchema
    stored_at: float


class SchemaCache:
    """Thread-safe TTL cache of dataset schemas, one per process."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            ttl_seconds: How long a stored schema stays valid
            clock: Monotonic time source, injectable for tests
        """
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be >= 0, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, dataset_id: str) -> Optional[DatasetSchema]:
        """Return the cached schema, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(dataset_id)
            if entry is None:
                return None

            age = self._clock() - entry.stored_at
            if age > self.ttl_seconds:
                del self._entries[dataset_id]
                logger.debug(f"evicted expired schema | dataset:{dataset_id} | age:{age:.1f}s")
                return None

            return entry.schema

    def set(self, dataset_id: str, schema: DatasetSchema) -> None:
        with self._lock:
            self._entries[dataset_id] = CacheEntry(schema=schema, stored_at=self._clock())
        logger.debug(f"stored schema | dataset:{dataset_id} | columns:{len(schema.columns)}")

    def has(self, dataset_id: str) -> bool:
        """True if a non-expired schema is cached. Evicts an expired one."""
        return self.get(dataset_id) is not None

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"cache cleared | entries:{count}")

    def __len__(self) -> int:
        # Counts stored entries, including ones that would fail the TTL check
        with self._lock:
            return len(self._entries)
