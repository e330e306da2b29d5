"""Health Promotion Administration (HPA) news API integration.

Endpoint: https://www.hpa.gov.tw/wf/newsapi.ashx?startdate=YYYY/1/1&enddate=YYYY/12/31
Partitioned by calendar year; the partition key is the year as a string.
"""

import logging
from datetime import datetime
from typing import Any

from app.integrations.base import JSONUpstreamClient

logger = logging.getLogger(__name__)

PUBLISH_DATE_FIELD = "發布日期"
TITLE_FIELD = "標題"
CONTENT_FIELD = "內容"
SEARCH_FIELDS = [TITLE_FIELD, CONTENT_FIELD]

_DATE_FORMATS = (
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
)


def build_year_range(year: str) -> dict[str, str]:
    return {"startdate": f"{year}/1/1", "enddate": f"{year}/12/31"}


def parse_publish_date(value: Any) -> datetime | None:
    """Parse the upstream date string; None when it cannot be read."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def filter_by_year(items: Any, year: str) -> list[dict[str, Any]]:
    """Keep items published in the given year. Bad dates are dropped silently."""
    if not isinstance(items, list):
        return []
    try:
        target = int(year)
    except (TypeError, ValueError):
        return []

    kept = []
    for item in items:
        if not isinstance(item, dict):
            continue
        published = parse_publish_date(item.get(PUBLISH_DATE_FIELD))
        if published is not None and published.year == target:
            kept.append(item)

    logger.debug("HPA news year filter | year=%s | raw=%d | kept=%d", year, len(items), len(kept))
    return kept


class HPANewsClient(JSONUpstreamClient):
    """Async client for the HPA news feed."""

    name = "HPA news"

    def build_params(self, key: str) -> dict[str, str]:
        return build_year_range(key)

    def shape(self, key: str, raw: Any) -> list[dict[str, Any]]:
        return filter_by_year(raw, key)
