"""Cache orchestrator — get-or-update over one partition table and one upstream.

Flow for get_or_update(key):
  1. Valid partition → return it (no network)
  2. Else fetch from upstream with key-derived params
  3. Success → shape → table.set() → return shaped payload (empty is cacheable)
  4. Failure → stale payload if fallback_on_error and it is non-empty,
     otherwise re-raise UpstreamUnavailable. The partition is left untouched.

Concurrent misses on the same key share one in-flight refresh task. Every
caller gets its outcome: fresh payload, stale fallback or the error.
"""

import asyncio
import logging
import time
from typing import Any, Protocol

from app.services.errors import UpstreamUnavailable
from app.services.partition_table import PartitionTable

logger = logging.getLogger(__name__)


class UpstreamSource(Protocol):
    """What the orchestrator needs from an integration."""

    name: str

    def build_params(self, key: str) -> dict[str, str]: ...

    async def fetch(self, params: dict[str, str]) -> Any: ...

    def shape(self, key: str, raw: Any) -> list[Any]: ...


class CacheOrchestrator:
    """Partitioned TTL cache in front of a single upstream."""

    def __init__(
        self,
        table: PartitionTable,
        source: UpstreamSource,
        fallback_on_error: bool = False,
        single_flight: bool = True,
    ):
        self.table = table
        self.source = source
        self.fallback_on_error = fallback_on_error
        self.single_flight = single_flight
        self._inflight: dict[str, asyncio.Task] = {}

    @property
    def name(self) -> str:
        return self.source.name

    def is_valid(self, key: str) -> bool:
        return self.table.is_valid(key)

    def written_at(self, key: str) -> int | None:
        return self.table.written_at(key)

    async def get_or_update(self, key: str) -> list[Any]:
        if self.table.is_valid(key):
            logger.info("Cache HIT | source=%s | key=%s", self.name, key)
            return self.table.get(key)

        if not self.single_flight:
            return await self._refresh(key)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._shared_refresh(key))
            self._inflight[key] = task
        else:
            logger.info("Cache MISS | source=%s | key=%s | joining in-flight fetch", self.name, key)
        # A cancelled caller leaves the shared fetch running for the rest.
        return await asyncio.shield(task)

    async def _shared_refresh(self, key: str) -> list[Any]:
        try:
            return await self._refresh(key)
        finally:
            self._inflight.pop(key, None)

    async def _refresh(self, key: str) -> list[Any]:
        logger.info("Cache MISS | source=%s | key=%s | fetching upstream", self.name, key)
        params = self.source.build_params(key)

        start = time.monotonic()
        try:
            raw = await self.source.fetch(params)
        except UpstreamUnavailable as e:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            return self._fallback(key, e, elapsed_ms)

        shaped = self.source.shape(key, raw)
        await self.table.set(key, shaped)
        logger.info(
            "Cache UPDATED | source=%s | key=%s | records=%d | %dms",
            self.name, key, len(shaped), int((time.monotonic() - start) * 1000),
        )
        return shaped

    def _fallback(self, key: str, error: UpstreamUnavailable, elapsed_ms: int) -> list[Any]:
        if self.fallback_on_error:
            stale = self.table.get(key)
            if stale:
                logger.warning(
                    "Upstream failed — serving stale partition | source=%s | key=%s | records=%d | %dms | %s",
                    self.name, key, len(stale), elapsed_ms, str(error)[:200],
                )
                return stale

        logger.error(
            "Upstream failed — no fallback | source=%s | key=%s | %dms | %s",
            self.name, key, elapsed_ms, str(error)[:200],
        )
        raise error

    async def invalidate(self, key: str | None = None) -> None:
        await self.table.invalidate(key)
