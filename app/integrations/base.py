"""Shared async GET transport for the cached upstream APIs.

One attempt per call, bounded timeout, no retries. Anything other than a
2xx JSON response raises UpstreamUnavailable.
"""

import logging
import time
from typing import Any

import httpx

from app.services.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def error_detail(response: httpx.Response) -> str:
    """Best-effort extraction of the upstream's own error message."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for field in ("message", "error", "detail"):
            value = body.get(field)
            if value:
                return str(value)
    return f"HTTP {response.status_code}"


class JSONUpstreamClient:
    """Async client for a single upstream endpoint (base URL + fixed path)."""

    name = "upstream"

    def __init__(self, base_url: str, path: str, timeout: float = 15.0):
        self.base_url = base_url.rstrip("/")
        self.path = path
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.path.lstrip('/')}"

    async def fetch(self, params: dict[str, str]) -> Any:
        start = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, headers=DEFAULT_HEADERS) as client:
                response = await client.get(self.url, params=params)
        except httpx.TimeoutException as e:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            logger.warning("%s timeout | %dms", self.name, elapsed_ms)
            raise UpstreamUnavailable(self.name, f"timed out after {self.timeout:g}s") from e
        except httpx.HTTPError as e:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            logger.error("%s transport error | %dms | %s", self.name, elapsed_ms, str(e)[:200])
            raise UpstreamUnavailable(self.name, str(e) or type(e).__name__) from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        if not response.is_success:
            detail = error_detail(response)
            logger.warning(
                "%s | status=%d | %dms | %s",
                self.name, response.status_code, elapsed_ms, detail[:200],
            )
            raise UpstreamUnavailable(self.name, detail, response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            logger.error("%s returned non-JSON body | %dms", self.name, elapsed_ms)
            raise UpstreamUnavailable(self.name, "invalid JSON response", response.status_code) from e

        logger.info("%s OK | status=%d | %dms", self.name, response.status_code, elapsed_ms)
        return data
