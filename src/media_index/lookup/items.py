"""
Item lookup for automation front-ends.

Resolves, suggests and searches library items over a LibraryStore. All
filtering beyond sort and limit happens in memory after the fetch, so the
search only ever sees the most recently relevant items.
"""

import logging
from typing import Iterable, List, Optional

from media_index.lookup.models import ItemEntity
from media_index.models import MediaItem, SortDescriptor
from media_index.storage.protocols import LibraryStore

logger = logging.getLogger(__name__)

SUGGESTED_LIMIT = 20
SEARCH_FETCH_LIMIT = 100

# Most recent access or watch first, then most recently added
RECENCY_ORDER = (
    SortDescriptor("last_activity_at", descending=True),
    SortDescriptor("added_at", descending=True),
)


def matches_query(item: MediaItem, query: str) -> bool:
    """Case-insensitive substring match on title, channel ID or any keyword."""
    needle = query.lower()

    if needle in item.title.lower():
        return True
    if item.channel_id and needle in item.channel_id.lower():
        return True
    return any(needle in keyword.lower() for keyword in item.keywords)


class ItemLookup:
    """
    Entity resolution for library items.

    Store errors are not caught; they reach the caller unchanged.

    Example:
        >>> lookup = ItemLookup(store)
        >>> [entity.title for entity in lookup.search("swift")]
        ['Swift Concurrency Explained', 'SwiftUI Layout Basics']
    """

    def __init__(self, store: LibraryStore):
        self.store = store

    def resolve(self, ids: Iterable[str]) -> List[ItemEntity]:
        """Items whose identifier is one of ``ids``, in recency order."""
        wanted = set(ids)
        items = self.store.fetch_items(order_by=RECENCY_ORDER)

        matches = [ItemEntity.from_item(item) for item in items if item.identifier in wanted]
        logger.debug(f"Resolved {len(matches)}/{len(wanted)} item identifiers")
        return matches

    def suggest(self) -> List[ItemEntity]:
        items = self.store.fetch_items(order_by=RECENCY_ORDER, limit=SUGGESTED_LIMIT)
        return [ItemEntity.from_item(item) for item in items]

    def default_item(self) -> Optional[ItemEntity]:
        items = self.store.fetch_items(order_by=RECENCY_ORDER, limit=1)
        return ItemEntity.from_item(items[0]) if items else None

    def find_items(
        self,
        query: str,
        fetch_limit: int = SEARCH_FETCH_LIMIT,
        limit: Optional[int] = None,
    ) -> List[MediaItem]:
        """
        Fetch the ``fetch_limit`` most recent items, then keep the ones
        matching ``query``.

        Args:
            query: Search text (case-insensitive substring)
            fetch_limit: Number of items considered before filtering
            limit: Maximum number of matches returned (None = all)

        Returns:
            Matching items in recency order
        """
        items = self.store.fetch_items(order_by=RECENCY_ORDER, limit=fetch_limit)
        matches = [item for item in items if matches_query(item, query)]

        logger.debug(f"Search '{query}': {len(matches)} matches in {len(items)} items")

        if limit is not None:
            matches = matches[:limit]
        return matches

    def search(self, query: str, limit: Optional[int] = None) -> List[ItemEntity]:
        return [ItemEntity.from_item(item) for item in self.find_items(query, limit=limit)]
