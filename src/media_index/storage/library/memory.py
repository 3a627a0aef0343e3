"""
In-memory library storage implementation.

Provides a simple in-memory store for media items and collections, suitable
for testing and single-instance use. For persistence, use the SQLAlchemy
implementation.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, TypeVar

from media_index.models import Collection, MediaItem, SortDescriptor

logger = logging.getLogger(__name__)

T = TypeVar("T")


def sort_entities(entities: List[T], order_by: Sequence[SortDescriptor]) -> List[T]:
    """
    Stable multi-key sort. The first descriptor is the primary key; entities
    whose sort value is None come last regardless of direction.
    """
    result = list(entities)

    for descriptor in reversed(list(order_by)):
        present = [e for e in result if getattr(e, descriptor.field) is not None]
        missing = [e for e in result if getattr(e, descriptor.field) is None]
        present.sort(key=lambda e: getattr(e, descriptor.field), reverse=descriptor.descending)
        result = present + missing

    return result


class InMemoryLibraryStore:
    """
    In-memory implementation of the LibraryStore protocol.

    Stores copies of items and collections in dictionaries; insertion order
    is the final tie-break when sorting. Data is lost on restart.
    """

    def __init__(self):
        self._items: Dict[str, MediaItem] = {}
        self._collections: Dict[str, Collection] = {}

        logger.info("InMemoryLibraryStore initialized")

    # Items

    def add_item(self, item: MediaItem) -> str:
        """Add an item to the library (replacing one with the same identifier)."""
        identifier = item.identifier
        self._items[identifier] = item.model_copy(deep=True)

        logger.debug(f"Stored item {identifier}: '{item.title[:50]}'")
        return identifier

    def get_item(self, identifier: str) -> Optional[MediaItem]:
        item = self._items.get(identifier)
        return item.model_copy(deep=True) if item else None

    def update_item(self, item: MediaItem) -> bool:
        identifier = item.identifier
        if identifier not in self._items:
            logger.warning(f"Cannot update item {identifier}: not found")
            return False

        self._items[identifier] = item.model_copy(deep=True)
        logger.debug(f"Updated item {identifier}")
        return True

    def delete_item(self, identifier: str) -> bool:
        if identifier not in self._items:
            logger.warning(f"Cannot delete item {identifier}: not found")
            return False

        del self._items[identifier]
        logger.info(f"Deleted item {identifier}")
        return True

    def fetch_items(
        self,
        order_by: Sequence[SortDescriptor] = (),
        limit: Optional[int] = None,
    ) -> List[MediaItem]:
        items = sort_entities(list(self._items.values()), order_by)
        if limit is not None:
            items = items[:limit]

        return [item.model_copy(deep=True) for item in items]

    # Collections

    def add_collection(self, collection: Collection) -> str:
        self._collections[collection.id] = collection.model_copy(deep=True)

        logger.debug(f"Stored collection {collection.id}: '{collection.label}'")
        return collection.id

    def get_collection(self, collection_id: str) -> Optional[Collection]:
        collection = self._collections.get(collection_id)
        return collection.model_copy(deep=True) if collection else None

    def delete_collection(self, collection_id: str) -> bool:
        if collection_id not in self._collections:
            logger.warning(f"Cannot delete collection {collection_id}: not found")
            return False

        del self._collections[collection_id]
        logger.info(f"Deleted collection {collection_id}")
        return True

    def fetch_collections(
        self,
        order_by: Sequence[SortDescriptor] = (),
        limit: Optional[int] = None,
    ) -> List[Collection]:
        collections = sort_entities(list(self._collections.values()), order_by)
        if limit is not None:
            collections = collections[:limit]

        return [collection.model_copy(deep=True) for collection in collections]

    def clear(self) -> Dict[str, Any]:
        """Clear ALL items and collections from the store."""
        counts = {"items": len(self._items), "collections": len(self._collections)}
        self._items.clear()
        self._collections.clear()

        logger.info(f"Cleared library ({counts['items']} items, {counts['collections']} collections)")
        return counts
