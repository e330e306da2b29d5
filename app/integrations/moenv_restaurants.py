"""Ministry of Environment (MOENV) open-data restaurant registry.

Endpoint: https://data.moenv.gov.tw/api/v2/gis_p_11
Partitioned by city; the sentinel key "all" fetches without a city filter.
"""

from typing import Any

from app.integrations.base import JSONUpstreamClient

ALL_CITIES = "all"
CITY_FIELD = "city"
SEARCH_FIELDS = ["name", "address"]


def extract_records(raw: Any) -> list[dict[str, Any]]:
    """Pull the records list out of the response; anything else → []."""
    if not isinstance(raw, dict):
        return []
    records = raw.get("records")
    if not isinstance(records, list):
        return []
    return records


class RestaurantClient(JSONUpstreamClient):
    """Async client for the MOENV restaurant dataset."""

    name = "MOENV restaurants"

    def __init__(
        self,
        base_url: str,
        path: str,
        api_key: str = "",
        limit: int = 2000,
        sort: str = "ImportDate desc",
        timeout: float = 15.0,
    ):
        super().__init__(base_url, path, timeout=timeout)
        self.api_key = api_key
        self.limit = limit
        self.sort = sort

    def build_params(self, key: str) -> dict[str, str]:
        params = {
            "api_key": self.api_key,
            "limit": str(self.limit),
            "sort": self.sort,
            "format": "JSON",
        }
        if key and key != ALL_CITIES:
            params["filters[city]"] = key
        return params

    def shape(self, key: str, raw: Any) -> list[dict[str, Any]]:
        return extract_records(raw)
