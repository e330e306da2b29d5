"""Error taxonomy for the partition cache.

  - UpstreamUnavailable: transport error or non-2xx from an external API.
    Recovered by stale fallback where the feed allows it, else surfaced.
  - SnapshotCorrupt: unreadable snapshot file. Always recovered (empty cache).
  - SnapshotWriteFailed: snapshot could not be written. Always recovered
    (logged; the in-memory table stays authoritative).
"""


class CacheError(Exception):
    """Base class for cache engine errors."""


class UpstreamUnavailable(CacheError):
    """An upstream API could not deliver a usable response."""

    def __init__(self, source: str, detail: str = "", status_code: int | None = None):
        self.source = source
        self.detail = detail
        self.status_code = status_code
        message = f"Could not retrieve data from {source}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class SnapshotCorrupt(CacheError):
    """The snapshot file exists but does not hold a valid cache document."""


class SnapshotWriteFailed(CacheError):
    """The snapshot file could not be replaced."""
