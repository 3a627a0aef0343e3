"""Integration tests for the Redis search index backend."""

import pytest

from media_index.indexing.sync import SearchIndexSync
from media_index.models import IndexEntry, MediaItem
from media_index.storage.preferences.memory import InMemoryIndexingPreferences


@pytest.mark.integration
@pytest.mark.asyncio
async def test_redis_index_and_read_back(redis_index):
    entry = IndexEntry(
        unique_id="remote-abc",
        domain="test.items",
        title="Intro to Swift",
        keywords=["Swift", "ios"],
        duration=600.0,
    )

    await redis_index.index_batch([entry])

    assert redis_index.get("remote-abc", "test.items") == entry
    assert redis_index.ids("test.items") == {"remote-abc"}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_redis_reindex_replaces_attributes(redis_index):
    await redis_index.index_batch(
        [IndexEntry(unique_id="remote-abc", domain="test.items", title="Old", keywords=["old"])]
    )
    await redis_index.index_batch(
        [IndexEntry(unique_id="remote-abc", domain="test.items", title="New")]
    )

    entry = redis_index.get("remote-abc", "test.items")
    assert entry.title == "New"
    assert entry.keywords is None


@pytest.mark.integration
@pytest.mark.asyncio
async def test_redis_delete_by_ids_and_domain(redis_index):
    await redis_index.index_batch(
        [
            IndexEntry(unique_id="remote-a", domain="test.one", title="A"),
            IndexEntry(unique_id="remote-b", domain="test.one", title="B"),
            IndexEntry(unique_id="remote-c", domain="test.two", title="C"),
        ]
    )

    await redis_index.delete_by_ids(["remote-a", "remote-missing"])
    assert redis_index.ids("test.one") == {"remote-b"}

    await redis_index.delete_by_domain("test.one")
    assert redis_index.ids("test.one") == set()
    assert redis_index.get("remote-b", "test.one") is None
    assert redis_index.ids("test.two") == {"remote-c"}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_sync_against_redis(redis_index):
    """SearchIndexSync keeps its state in line with what Redis holds."""
    sync = SearchIndexSync(redis_index, InMemoryIndexingPreferences(), domain="test.items")
    items = [MediaItem(remote_id=f"v{i}", title=f"Video {i}") for i in range(3)]

    assert await sync.reindex_all(items) is True
    assert redis_index.ids("test.items") == {"remote-v0", "remote-v1", "remote-v2"}
    assert sync.indexed_ids == redis_index.ids("test.items")

    assert await sync.remove_item(items[0]) is True
    assert sync.indexed_ids == redis_index.ids("test.items")
