"""
Unit tests for LibraryService.

Uses the in-memory store and search index with a mocked embedding engine to
verify orchestration: the store is updated, the index follows best effort and
lookup errors reach the caller.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from media_index.config import LibrarySettings
from media_index.errors import (
    CollectionNotFoundError,
    EmbeddingInputError,
    ItemNotFoundError,
    NoItemsFoundError,
)
from media_index.indexing import SearchIndexSync
from media_index.library_service import LibraryService
from media_index.models import Collection, MediaItem
from media_index.storage.library.memory import InMemoryLibraryStore
from media_index.storage.library.sqlalchemy import SQLAlchemyLibraryStore
from media_index.storage.preferences.memory import InMemoryIndexingPreferences
from media_index.storage.search_index.memory import InMemorySearchIndex


@pytest.fixture
def store():
    return InMemoryLibraryStore()


@pytest.fixture
def search_index():
    return InMemorySearchIndex()


@pytest.fixture
def mock_engine():
    """Mock embedding engine."""
    engine = Mock()
    engine.generate_embedding = AsyncMock(return_value=[1.0, 0.0])
    engine.generate_embeddings = AsyncMock(side_effect=lambda texts: [[1.0, 0.0] for _ in texts])
    return engine


@pytest.fixture
def service(store, search_index, mock_engine):
    """Create a library service over in-memory collaborators."""
    index_sync = SearchIndexSync(search_index, InMemoryIndexingPreferences(), domain="test.items")
    return LibraryService(store=store, embedding_engine=mock_engine, index_sync=index_sync)


@pytest.fixture
def swift_collection(store):
    collection = Collection(
        id="swift", label="Swift Programming", centroid=[1.0, 0.0], item_count=5, confidence_score=0.9
    )
    store.add_collection(collection)
    return collection


@pytest.mark.asyncio
async def test_add_item_stores_and_indexes(service, store, search_index):
    item = MediaItem(remote_id="abc", title="Intro to Swift", tags=["swift"])

    assert await service.add_item(item) == "abc"

    assert store.get_item("abc").title == "Intro to Swift"
    entry = search_index.get("remote-abc", "test.items")
    assert entry.keywords == ["swift"]
    assert service.index_sync.indexed_ids == {"remote-abc"}


@pytest.mark.asyncio
async def test_add_item_survives_index_failure(service, store, search_index):
    """A broken search index never fails the add."""
    search_index.fail_with = ConnectionError("index offline")

    await service.add_item(MediaItem(remote_id="abc", title="Intro to Swift"))

    assert store.get_item("abc") is not None
    assert service.index_sync.indexed_ids == frozenset()
    assert service.index_sync.last_error.operation == "index"


@pytest.mark.asyncio
async def test_embed_item(service, store, mock_engine):
    store.add_item(MediaItem(remote_id="abc", title="Intro to Swift", channel_title="Sean Allen"))

    item = await service.embed_item("abc", ocr_text="SWIFT 101")

    assert item.embedding == [1.0, 0.0]
    stored = store.get_item("abc")
    assert stored.embedding == [1.0, 0.0]
    assert stored.ocr_text == "SWIFT 101"

    text = mock_engine.generate_embedding.await_args.args[0]
    assert "Intro to Swift" in text
    assert "SWIFT 101" in text


@pytest.mark.asyncio
async def test_embed_item_error_propagates(service, store, mock_engine):
    store.add_item(MediaItem(remote_id="abc", title="Intro to Swift"))
    mock_engine.generate_embedding.side_effect = EmbeddingInputError()

    with pytest.raises(EmbeddingInputError):
        await service.embed_item("abc")

    assert store.get_item("abc").embedding is None


@pytest.mark.asyncio
async def test_embed_missing_item_raises(service):
    with pytest.raises(ItemNotFoundError):
        await service.embed_item("missing")


@pytest.mark.asyncio
async def test_embed_missing_only_pending(service, store, mock_engine):
    store.add_item(MediaItem(remote_id="done", title="Done", embedding=[0.0, 1.0]))
    store.add_item(MediaItem(remote_id="todo", title="Todo"))

    embedded = await service.embed_missing()

    assert [item.identifier for item in embedded] == ["todo"]
    assert store.get_item("todo").embedding == [1.0, 0.0]
    assert store.get_item("done").embedding == [0.0, 1.0]
    assert len(mock_engine.generate_embeddings.await_args.args[0]) == 1


@pytest.mark.asyncio
async def test_embed_missing_batch_fails_fast(service, store, mock_engine):
    store.add_item(MediaItem(remote_id="a", title="A"))
    store.add_item(MediaItem(remote_id="b", title="B"))
    mock_engine.generate_embeddings.side_effect = EmbeddingInputError()

    with pytest.raises(EmbeddingInputError):
        await service.embed_missing()

    assert all(item.embedding is None for item in store.fetch_items())


@pytest.mark.asyncio
async def test_embed_missing_nothing_to_do(service, mock_engine):
    assert await service.embed_missing() == []
    mock_engine.generate_embeddings.assert_not_awaited()


@pytest.mark.asyncio
async def test_remove_item(service, store, search_index):
    await service.add_item(MediaItem(remote_id="abc", title="Intro to Swift"))

    await service.remove_item("abc")

    assert store.get_item("abc") is None
    assert search_index.ids() == set()
    assert service.index_sync.indexed_ids == frozenset()


@pytest.mark.asyncio
async def test_add_to_collection(service, store, search_index, swift_collection):
    await service.add_item(MediaItem(remote_id="abc", title="Intro to Swift", tags=["ios"]))

    message = await service.add_to_collection("abc", "swift")

    assert message == "Added Intro to Swift to Swift Programming"
    assert store.get_item("abc").topic_tags == ["Swift Programming"]
    assert search_index.get("remote-abc", "test.items").keywords == ["Swift Programming", "ios"]


@pytest.mark.asyncio
async def test_add_to_collection_is_idempotent(service, store, swift_collection):
    store.add_item(MediaItem(remote_id="abc", title="Intro to Swift"))

    await service.add_to_collection("abc", "swift")
    await service.add_to_collection("abc", "swift")

    assert store.get_item("abc").topic_tags == ["Swift Programming"]


@pytest.mark.asyncio
async def test_add_to_missing_collection(service, store):
    store.add_item(MediaItem(remote_id="abc", title="Intro to Swift"))

    with pytest.raises(CollectionNotFoundError):
        await service.add_to_collection("abc", "missing")


@pytest.mark.asyncio
async def test_assign_collection_embeds_first(service, store, mock_engine, swift_collection):
    store.add_item(MediaItem(remote_id="abc", title="Intro to Swift"))

    collection = await service.assign_collection("abc")

    assert collection.id == "swift"
    mock_engine.generate_embedding.assert_awaited_once()
    assert store.get_item("abc").topic_tags == ["Swift Programming"]


@pytest.mark.asyncio
async def test_assign_collection_no_match(service, store, mock_engine):
    store.add_collection(
        Collection(id="far", label="Cooking", centroid=[-1.0, 0.0], item_count=3, confidence_score=0.9)
    )
    store.add_item(MediaItem(remote_id="abc", title="Intro to Swift", embedding=[1.0, 0.0]))

    assert await service.assign_collection("abc") is None
    mock_engine.generate_embedding.assert_not_awaited()
    assert store.get_item("abc").topic_tags == []


@pytest.mark.asyncio
async def test_random_item_prefers_unwatched(service, store):
    store.add_item(MediaItem(remote_id="watched", title="Watched", watch_progress=30.0))
    store.add_item(MediaItem(remote_id="fresh", title="Fresh"))

    rng = Mock()
    rng.random.return_value = 0.1
    rng.choice.side_effect = lambda seq: seq[0]

    item = await service.random_item(rng=rng)

    assert item.identifier == "fresh"


@pytest.mark.asyncio
async def test_random_item_falls_back_to_all(service, store):
    store.add_item(MediaItem(remote_id="watched", title="Watched", watch_progress=30.0))
    store.add_item(MediaItem(remote_id="fresh", title="Fresh"))

    rng = Mock()
    rng.random.return_value = 0.95
    rng.choice.side_effect = lambda seq: seq[0]

    item = await service.random_item(rng=rng)

    assert item.identifier == "watched"
    assert len(rng.choice.call_args.args[0]) == 2


@pytest.mark.asyncio
async def test_random_item_from_collection(service, store, swift_collection):
    store.add_item(MediaItem(remote_id="a", title="A", topic_tags=["Swift Programming"]))
    store.add_item(MediaItem(remote_id="b", title="B", topic_tags=["Cooking"]))

    for _ in range(5):
        item = await service.random_item(collection_id="swift")
        assert item.identifier == "a"


@pytest.mark.asyncio
async def test_random_item_empty_library(service):
    with pytest.raises(NoItemsFoundError):
        await service.random_item()


@pytest.mark.asyncio
async def test_random_item_unknown_collection(service, store):
    store.add_item(MediaItem(remote_id="a", title="A"))

    with pytest.raises(CollectionNotFoundError):
        await service.random_item(collection_id="missing")


@pytest.mark.asyncio
async def test_search_items(service, store):
    store.add_item(MediaItem(remote_id="a", title="Intro to Swift"))
    store.add_item(MediaItem(remote_id="b", title="Cooking pasta", tags=["swift dinner"]))
    store.add_item(MediaItem(remote_id="c", title="Gardening"))

    results = await service.search_items("swift", limit=10)

    assert {item.identifier for item in results} == {"a", "b"}
    assert len(await service.search_items("swift", limit=1)) == 1


@pytest.mark.asyncio
async def test_record_access(service, store):
    store.add_item(MediaItem(remote_id="a", title="A"))

    item = await service.record_access("a")

    assert item.last_accessed_at is not None
    assert store.get_item("a").last_activity_at == item.last_accessed_at


@pytest.mark.asyncio
async def test_record_progress_is_clamped(service, store):
    store.add_item(MediaItem(remote_id="a", title="A", duration=100.0))

    assert (await service.record_progress("a", 150.0)).watch_progress == 100.0
    assert (await service.record_progress("a", -5.0)).watch_progress == 0.0

    item = await service.record_progress("a", 40.0)
    assert item.progress_percentage == pytest.approx(0.4)
    assert store.get_item("a").last_watched_at is not None


@pytest.mark.asyncio
async def test_reindex_library(service, store, search_index):
    store.add_item(MediaItem(remote_id="a", title="A"))
    store.add_item(MediaItem(local_path="/videos/b.mp4", title="B"))

    assert await service.reindex_library() is True

    assert len(search_index.ids("test.items")) == 2
    assert service.index_sync.preferences.indexed_count == 2


@pytest.mark.asyncio
async def test_from_settings_builds_sqlalchemy_service():
    model = Mock()
    model.available = True
    model.model_name = "fake-model"
    settings = LibrarySettings(database_url="sqlite:///:memory:", search_domain="test.items")

    service = LibraryService.from_settings(model, settings)

    assert isinstance(service.store, SQLAlchemyLibraryStore)
    assert service.index_sync.domain == "test.items"
    assert service.embedding_engine.dimension == 512

    await service.add_item(MediaItem(remote_id="abc", title="Intro to Swift"))
    assert service.store.get_item("abc").title == "Intro to Swift"
