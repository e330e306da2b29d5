"""Tests for the on-disk snapshot store."""

import json

import pytest

from app.services.snapshot_store import CacheSnapshot, SnapshotStore


@pytest.fixture
def store(tmp_path):
    return SnapshotStore(tmp_path / "cache" / "news.json")


class TestSnapshotLoad:
    def test_missing_file_is_empty(self, store):
        snapshot = store.load()
        assert snapshot.data == {}
        assert snapshot.timestamp == {}

    def test_malformed_json_is_empty(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text('{"data": {"2025": [', encoding="utf-8")
        snapshot = store.load()
        assert snapshot.data == {}
        assert snapshot.timestamp == {}

    def test_wrong_shape_is_empty(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps({"data": ["not", "a", "map"]}), encoding="utf-8")
        assert store.load().data == {}

    def test_non_object_document_is_empty(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("[1, 2, 3]", encoding="utf-8")
        assert store.load().data == {}

    def test_directory_in_place_of_file_is_empty(self, store):
        store.path.mkdir(parents=True)
        assert store.load().data == {}

    def test_partial_document_defaults(self, store):
        """A document with only data still loads; timestamps default to empty."""
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps({"data": {"2025": [{"a": 1}]}}), encoding="utf-8")
        snapshot = store.load()
        assert snapshot.data == {"2025": [{"a": 1}]}
        assert snapshot.timestamp == {}


class TestSnapshotSave:
    def test_save_creates_directory(self, store):
        assert not store.path.parent.exists()
        assert store.save(CacheSnapshot(data={"2025": []}, timestamp={"2025": 1}))
        assert store.path.exists()

    def test_save_writes_expected_shape(self, store):
        store.save(CacheSnapshot(data={"臺北市": [{"name": "綠色餐廳"}]}, timestamp={"臺北市": 42}))
        doc = json.loads(store.path.read_text(encoding="utf-8"))
        assert doc == {"data": {"臺北市": [{"name": "綠色餐廳"}]}, "timestamp": {"臺北市": 42}}
        # Non-ASCII kept verbatim
        assert "綠色餐廳" in store.path.read_text(encoding="utf-8")

    def test_save_replaces_whole_file(self, store):
        store.save(CacheSnapshot(data={"2024": [1], "2025": [2]}, timestamp={"2024": 1, "2025": 2}))
        store.save(CacheSnapshot(data={"2025": [3]}, timestamp={"2025": 3}))
        doc = json.loads(store.path.read_text(encoding="utf-8"))
        assert doc == {"data": {"2025": [3]}, "timestamp": {"2025": 3}}

    def test_save_leaves_no_temp_files(self, store):
        store.save(CacheSnapshot(data={"2025": []}, timestamp={"2025": 1}))
        assert [p.name for p in store.path.parent.iterdir()] == ["news.json"]

    def test_save_failure_is_swallowed(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file where the cache dir should be", encoding="utf-8")
        store = SnapshotStore(blocker / "news.json")
        assert store.save(CacheSnapshot(data={"2025": []}, timestamp={"2025": 1})) is False

    def test_failed_temp_cleanup_is_swallowed(self, store, monkeypatch):
        def fail(*args, **kwargs):
            raise OSError("disk gone")

        monkeypatch.setattr("app.services.snapshot_store.os.replace", fail)
        monkeypatch.setattr("app.services.snapshot_store.os.unlink", fail)

        assert store.save(CacheSnapshot(data={"2025": []}, timestamp={"2025": 1})) is False
        assert not store.path.exists()

    @pytest.mark.asyncio
    async def test_save_async(self, store):
        assert await store.save_async(CacheSnapshot(data={"all": [{"x": 1}]}, timestamp={"all": 5}))
        assert store.load().data == {"all": [{"x": 1}]}


class TestSnapshotRoundTrip:
    def test_save_load_is_idempotent(self, store):
        original = CacheSnapshot(
            data={"2025": [{"標題": "新聞", "n": 1}], "2024": []},
            timestamp={"2025": 1735689600000, "2024": 1704067200000},
        )
        store.save(original)
        first_bytes = store.path.read_bytes()

        store.save(store.load())
        assert store.path.read_bytes() == first_bytes
        assert store.load() == original
