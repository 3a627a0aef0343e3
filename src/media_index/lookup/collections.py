"""
Collection ranking for automation front-ends.

Collections are always fetched largest first with a bounded fetch limit, and
only then filtered. The limits differ per operation (suggest 20, default 10,
search 50) and the confidence filter runs after the limit: a collection cut by
the limit is never reconsidered, even if it would pass the filter.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from media_index.lookup.models import CollectionEntity
from media_index.models import Collection, SortDescriptor
from media_index.storage.protocols import LibraryStore

logger = logging.getLogger(__name__)

MIN_CONFIDENCE_SCORE = 0.5

SUGGESTED_FETCH_LIMIT = 20
DEFAULT_FETCH_LIMIT = 10
SEARCH_FETCH_LIMIT = 50

SIZE_ORDER = (SortDescriptor("item_count", descending=True),)


class CollectionRanker:
    """
    Entity resolution and ranking for collections.

    Args:
        store: Library store holding the collections
        min_confidence: Confidence threshold for suggestions and the default
    """

    def __init__(self, store: LibraryStore, min_confidence: float = MIN_CONFIDENCE_SCORE):
        self.store = store
        self.min_confidence = min_confidence

    @classmethod
    def from_settings(cls, store: LibraryStore, settings) -> "CollectionRanker":
        return cls(store, min_confidence=settings.min_collection_confidence)

    def _qualifies(self, collection: Collection) -> bool:
        return collection.confidence_score >= self.min_confidence

    def _suggested(self) -> List[Collection]:
        collections = self.store.fetch_collections(order_by=SIZE_ORDER, limit=SUGGESTED_FETCH_LIMIT)
        return [c for c in collections if self._qualifies(c)]

    def resolve(self, ids: Iterable[str]) -> List[CollectionEntity]:
        wanted = set(ids)
        collections = self.store.fetch_collections(order_by=SIZE_ORDER)
        return [CollectionEntity.from_collection(c) for c in collections if c.id in wanted]

    def suggest(self) -> List[CollectionEntity]:
        """Confident collections among the 20 largest."""
        return [CollectionEntity.from_collection(c) for c in self._suggested()]

    def default_collection(self) -> Optional[CollectionEntity]:
        """
        First confident collection among the 10 largest; falls back to the
        largest collection when none of them is confident enough.
        """
        collections = self.store.fetch_collections(order_by=SIZE_ORDER, limit=DEFAULT_FETCH_LIMIT)
        if not collections:
            return None

        for collection in collections:
            if self._qualifies(collection):
                return CollectionEntity.from_collection(collection)

        logger.debug(
            f"No collection meets confidence {self.min_confidence}, "
            f"falling back to largest ({collections[0].label})"
        )
        return CollectionEntity.from_collection(collections[0])

    def search(self, query: str) -> List[CollectionEntity]:
        """Label substring match among the 50 largest, regardless of confidence."""
        needle = query.lower()
        collections = self.store.fetch_collections(order_by=SIZE_ORDER, limit=SEARCH_FETCH_LIMIT)
        return [
            CollectionEntity.from_collection(c) for c in collections if needle in c.label.lower()
        ]

    def best_match(self, embedding: Sequence[float]) -> Optional[Collection]:
        """
        The suggested collection whose centroid is most similar to
        ``embedding``, or None when no suggested collection has a positive
        similarity.
        """
        best: Optional[Collection] = None
        best_score = 0.0

        for collection in self._suggested():
            score = collection.similarity(list(embedding))
            if score > best_score:
                best, best_score = collection, score

        if best is not None:
            logger.debug(f"Best matching collection: {best.label} (similarity={best_score:.3f})")
        return best
