"""Durable snapshot of a partition table — one JSON document per feed.

File shape:
    {"data": {"<key>": [<record>, ...]}, "timestamp": {"<key>": <epoch-ms>}}

Every save replaces the whole file (temp file + rename), so readers never see
a half-written document. Load and save never raise to the caller.
"""

import asyncio
import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from app.services.errors import SnapshotCorrupt, SnapshotWriteFailed

logger = logging.getLogger(__name__)


class CacheSnapshot(BaseModel):
    """Full serialised contents of one partition table."""
    data: dict[str, list[Any]] = Field(default_factory=dict)
    timestamp: dict[str, int] = Field(default_factory=dict)


class SnapshotStore:
    """Reads and writes a single snapshot file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> CacheSnapshot:
        """Read the snapshot. Missing or corrupt file → empty snapshot."""
        if not self.path.exists():
            logger.info("Snapshot missing — starting empty | path=%s", self.path)
            return CacheSnapshot()
        try:
            snapshot = self._read()
        except SnapshotCorrupt as e:
            logger.warning("Snapshot unreadable — starting empty | path=%s | %s", self.path, str(e)[:200])
            return CacheSnapshot()
        logger.info("Snapshot loaded | path=%s | partitions=%d", self.path, len(snapshot.data))
        return snapshot

    def save(self, snapshot: CacheSnapshot) -> bool:
        """Replace the snapshot file. Returns False (and logs) on failure."""
        try:
            self._write(snapshot)
        except SnapshotWriteFailed as e:
            logger.error("Snapshot write failed | path=%s | %s", self.path, str(e)[:200])
            return False
        logger.debug("Snapshot saved | path=%s | partitions=%d", self.path, len(snapshot.data))
        return True

    async def save_async(self, snapshot: CacheSnapshot) -> bool:
        """Run save() off the event loop."""
        return await asyncio.to_thread(self.save, snapshot)

    def _read(self) -> CacheSnapshot:
        try:
            raw = self.path.read_text(encoding="utf-8")
            return CacheSnapshot.model_validate(json.loads(raw))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            raise SnapshotCorrupt(str(e)) from e

    def _write(self, snapshot: CacheSnapshot) -> None:
        content = json.dumps(snapshot.model_dump(), ensure_ascii=False, indent=2)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(content)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise SnapshotWriteFailed(str(e)) from e
