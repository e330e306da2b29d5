"""Partition table — in-memory map of partition key → {payload, written_at}.

One table per feed, constructed once and loaded from its snapshot file.
Validity is purely time-based: a partition is valid iff it exists and
now - written_at < ttl. get() ignores validity; callers decide.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import BaseModel, Field

from app.services.snapshot_store import CacheSnapshot, SnapshotStore

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def epoch_ms() -> int:
    return int(time.time() * 1000)


class CachePartition(BaseModel):
    key: str
    payload: list[Any] = Field(default_factory=list)
    written_at: int


class PartitionTable:
    """TTL-checked partitions backed by a SnapshotStore."""

    def __init__(self, store: SnapshotStore, ttl_seconds: float, clock: Clock = epoch_ms):
        self._store = store
        self._clock = clock
        self._ttl_ms = int(ttl_seconds * 1000)
        self._partitions: dict[str, CachePartition] = {}
        self._persist_lock = asyncio.Lock()
        self._restore(store.load())

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    def _restore(self, snapshot: CacheSnapshot):
        for key, payload in snapshot.data.items():
            written_at = snapshot.timestamp.get(key)
            if written_at is None:
                # No timestamp means it can never be valid; keep it as stale data.
                written_at = 0
            self._partitions[key] = CachePartition(key=key, payload=payload, written_at=written_at)

    def keys(self) -> list[str]:
        return list(self._partitions)

    def is_valid(self, key: str) -> bool:
        partition = self._partitions.get(key)
        if partition is None or partition.written_at <= 0:
            return False
        return self._clock() - partition.written_at < self._ttl_ms

    def get(self, key: str) -> list[Any] | None:
        partition = self._partitions.get(key)
        return partition.payload if partition else None

    def written_at(self, key: str) -> int | None:
        partition = self._partitions.get(key)
        return partition.written_at if partition else None

    async def set(self, key: str, payload: list[Any]) -> None:
        """Store payload with written_at = now, then persist."""
        self._partitions[key] = CachePartition(key=key, payload=payload, written_at=self._clock())
        logger.info("Partition SET | key=%s | records=%d", key, len(payload))
        await self.persist()

    async def invalidate(self, key: str | None = None) -> None:
        """Drop one partition, or all of them when key is None, then persist."""
        if key is None:
            count = len(self._partitions)
            self._partitions = {}
            logger.info("Partitions cleared | count=%d", count)
        else:
            removed = self._partitions.pop(key, None)
            logger.info("Partition invalidated | key=%s | existed=%s", key, removed is not None)
        await self.persist()

    def snapshot(self) -> CacheSnapshot:
        partitions = list(self._partitions.values())
        return CacheSnapshot(
            data={p.key: list(p.payload) for p in partitions},
            timestamp={p.key: p.written_at for p in partitions},
        )

    async def persist(self) -> bool:
        """Write the current table. Serialised so the last write carries the latest state."""
        async with self._persist_lock:
            return await self._store.save_async(self.snapshot())

    def summary(self) -> dict[str, dict]:
        """Metadata only — safe to expose in /health."""
        now = self._clock()
        return {
            p.key: {
                "age_s": round((now - p.written_at) / 1000, 1),
                "valid": self.is_valid(p.key),
                "records": len(p.payload),
            }
            for p in self._partitions.values()
        }


def format_timestamp(written_at: int | None) -> str | None:
    """Epoch ms → ISO-8601 UTC string."""
    if not written_at:
        return None
    return datetime.fromtimestamp(written_at / 1000, tz=timezone.utc).isoformat()
