"""
Unit tests for item lookup.

Runs against the in-memory library store to check recency ordering, fetch
limits and in-memory search filtering.
"""

from datetime import datetime, timedelta
from unittest.mock import Mock

import pytest

from media_index.lookup import ItemEntity, ItemLookup, matches_query
from media_index.models import MediaItem
from media_index.storage.library.memory import InMemoryLibraryStore

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0)


def make_item(remote_id, title=None, added_minutes=0, **kwargs):
    return MediaItem(
        remote_id=remote_id,
        title=title or f"Video {remote_id}",
        added_at=BASE_TIME + timedelta(minutes=added_minutes),
        **kwargs,
    )


@pytest.fixture
def store():
    return InMemoryLibraryStore()


@pytest.fixture
def lookup(store):
    return ItemLookup(store)


def test_suggest_orders_by_activity_then_added(store, lookup):
    """Recently watched/accessed first; never-touched items by added date."""
    store.add_item(make_item("old", added_minutes=0))
    store.add_item(make_item("new", added_minutes=10))
    store.add_item(
        make_item("watched", added_minutes=1, last_watched_at=BASE_TIME + timedelta(days=1))
    )
    store.add_item(
        make_item("accessed", added_minutes=2, last_accessed_at=BASE_TIME + timedelta(days=2))
    )

    ids = [entity.id for entity in lookup.suggest()]

    assert ids == ["accessed", "watched", "new", "old"]


def test_suggest_uses_latest_of_access_and_watch(store, lookup):
    store.add_item(
        make_item(
            "a",
            last_watched_at=BASE_TIME + timedelta(days=5),
            last_accessed_at=BASE_TIME + timedelta(days=1),
        )
    )
    store.add_item(make_item("b", last_accessed_at=BASE_TIME + timedelta(days=3)))

    assert [entity.id for entity in lookup.suggest()] == ["a", "b"]


def test_suggest_limited_to_20(store, lookup):
    for i in range(25):
        store.add_item(make_item(f"v{i}", added_minutes=i))

    suggestions = lookup.suggest()

    assert len(suggestions) == 20
    assert suggestions[0].id == "v24"
    assert suggestions[-1].id == "v5"


def test_default_item(store, lookup):
    store.add_item(make_item("first", added_minutes=0))
    store.add_item(make_item("second", added_minutes=5))

    assert lookup.default_item() == ItemEntity(id="second", title="Video second")


def test_default_item_empty_library(lookup):
    assert lookup.default_item() is None


def test_search_matches_title_channel_and_tags(store, lookup):
    store.add_item(make_item("t", title="Learning SWIFT today", added_minutes=3))
    store.add_item(make_item("c", channel_id="UCswiftChannel", added_minutes=2))
    store.add_item(make_item("g", topic_tags=["Swift Programming"], added_minutes=1))
    store.add_item(make_item("s", tags=["swiftui"], added_minutes=4))
    store.add_item(make_item("n", title="Pasta night", tags=["cooking"], added_minutes=5))

    ids = [entity.id for entity in lookup.search("swift")]

    assert ids == ["s", "t", "c", "g"]


def test_search_only_considers_100_most_recent(store, lookup):
    store.add_item(make_item("needle", title="Rare topic", added_minutes=0))
    for i in range(100):
        store.add_item(make_item(f"v{i}", added_minutes=10 + i))

    assert lookup.search("rare") == []


def test_search_limit_applies_after_filtering(store, lookup):
    for i in range(5):
        store.add_item(make_item(f"m{i}", title=f"Match {i}", added_minutes=i))
        store.add_item(make_item(f"x{i}", title=f"Other {i}", added_minutes=10 + i))

    results = lookup.search("match", limit=2)

    assert [entity.id for entity in results] == ["m4", "m3"]


def test_resolve(store, lookup):
    store.add_item(make_item("a", added_minutes=0))
    store.add_item(MediaItem(local_path="/videos/talk.mp4", title="Talk", added_at=BASE_TIME))
    store.add_item(make_item("c", added_minutes=2))

    entities = lookup.resolve(["a", "/videos/talk.mp4", "missing"])

    assert {entity.id for entity in entities} == {"a", "/videos/talk.mp4"}
    local = next(entity for entity in entities if entity.id == "/videos/talk.mp4")
    assert local.is_local is True


def test_entities_project_item_fields(store, lookup):
    store.add_item(make_item("a", title="Intro", duration=95.0))

    entity = lookup.suggest()[0]

    assert entity == ItemEntity(id="a", title="ignored for equality")
    assert entity.title == "Intro"
    assert entity.duration == 95.0
    assert entity.is_local is False


def test_store_errors_pass_through():
    store = Mock()
    store.fetch_items = Mock(side_effect=RuntimeError("database is locked"))

    with pytest.raises(RuntimeError, match="database is locked"):
        ItemLookup(store).suggest()


def test_matches_query_is_case_insensitive():
    item = make_item("a", title="Intro to Rust", channel_id="UCabc", tags=["Systems"])

    assert matches_query(item, "RUST")
    assert matches_query(item, "ucab")
    assert matches_query(item, "system")
    assert not matches_query(item, "python")
