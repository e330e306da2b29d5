"""Query surface — read, search and invalidate over a cache orchestrator.

Responsibilities:
  - Resolve partition selectors (current year for news, "all" for restaurants)
  - Read a partition through get_or_update
  - Filter a partition by field value or keyword
  - Invalidate one partition or the whole feed
  - Report cache status for responses

Also builds the two configured feeds (news, restaurants).
"""

import logging
from datetime import datetime
from typing import Any

from app.config import Settings
from app.integrations.hpa_news import SEARCH_FIELDS as NEWS_SEARCH_FIELDS
from app.integrations.hpa_news import HPANewsClient
from app.integrations.moenv_restaurants import SEARCH_FIELDS as RESTAURANT_SEARCH_FIELDS
from app.integrations.moenv_restaurants import RestaurantClient
from app.services.cache import CacheOrchestrator
from app.services.keyword_filter import KeywordFilter
from app.services.partition_table import Clock, PartitionTable, epoch_ms, format_timestamp
from app.services.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


def current_year() -> str:
    return str(datetime.now().year)


class PartitionQuery:
    """Thin read/search/invalidate layer. Holds no caching logic itself."""

    def __init__(self, cache: CacheOrchestrator, keyword_filter: KeywordFilter):
        self.cache = cache
        self.keyword_filter = keyword_filter

    @property
    def name(self) -> str:
        return self.cache.name

    async def read_all(self, key: str) -> list[Any]:
        return await self.cache.get_or_update(key)

    async def read_where(self, key: str, field: str, value: Any) -> list[Any]:
        records = await self.cache.get_or_update(key)
        return [r for r in records if isinstance(r, dict) and r.get(field) == value]

    async def search(self, key: str, keyword: str | None) -> list[Any]:
        records = await self.cache.get_or_update(key)
        matched = self.keyword_filter.apply(records, keyword)
        logger.info(
            "Search | source=%s | key=%s | keyword=%s | matched=%d/%d",
            self.name, key, keyword or "-", len(matched), len(records),
        )
        return matched

    async def invalidate(self, key: str | None = None) -> None:
        await self.cache.invalidate(key or None)

    def status(self, key: str) -> dict[str, Any]:
        return {
            "cached": self.cache.is_valid(key),
            "cache_timestamp": format_timestamp(self.cache.written_at(key)),
        }

    def summary(self) -> dict[str, dict]:
        return self.cache.table.summary()


# ═══════════════ FEED FACTORIES ═══════════════

def build_news_query(settings: Settings, clock: Clock = epoch_ms, source=None) -> PartitionQuery:
    """HPA news: year partitions, 48h TTL, no stale fallback by default."""
    source = source or HPANewsClient(
        settings.hpa_base_url,
        settings.hpa_news_path,
        timeout=settings.upstream_timeout_seconds,
    )
    table = PartitionTable(
        SnapshotStore(settings.news_snapshot_path),
        ttl_seconds=settings.news_cache_ttl_seconds,
        clock=clock,
    )
    cache = CacheOrchestrator(
        table,
        source,
        fallback_on_error=settings.news_fallback_on_error,
        single_flight=settings.cache_single_flight,
    )
    return PartitionQuery(cache, KeywordFilter(NEWS_SEARCH_FIELDS, case_sensitive=True))


def build_restaurant_query(settings: Settings, clock: Clock = epoch_ms, source=None) -> PartitionQuery:
    """MOENV restaurants: city partitions, 24h TTL, stale fallback by default."""
    if source is None:
        if not settings.has_moenv_key:
            logger.warning("MOENV_API_KEY not set — restaurant requests will likely be rejected")
        source = RestaurantClient(
            settings.moenv_base_url,
            settings.moenv_restaurant_path,
            api_key=settings.moenv_api_key,
            limit=settings.restaurant_fetch_limit,
            sort=settings.restaurant_sort,
            timeout=settings.upstream_timeout_seconds,
        )
    table = PartitionTable(
        SnapshotStore(settings.restaurant_snapshot_path),
        ttl_seconds=settings.restaurant_cache_ttl_seconds,
        clock=clock,
    )
    cache = CacheOrchestrator(
        table,
        source,
        fallback_on_error=settings.restaurant_fallback_on_error,
        single_flight=settings.cache_single_flight,
    )
    return PartitionQuery(cache, KeywordFilter(RESTAURANT_SEARCH_FIELDS, case_sensitive=False))
