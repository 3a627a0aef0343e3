import logging
import random
from datetime import datetime
from typing import List, Optional

from sqlalchemy import create_engine

from media_index.config import LibrarySettings
from media_index.config import settings as default_settings
from media_index.embeddings import EmbeddingEngine, EmbeddingModel, EmbeddingService
from media_index.errors import CollectionNotFoundError, ItemNotFoundError, NoItemsFoundError
from media_index.indexing import SearchIndexSync
from media_index.lookup import CollectionRanker, ItemLookup
from media_index.models import Collection, MediaItem, SortDescriptor
from media_index.storage.library.sqlalchemy import SQLAlchemyLibraryStore
from media_index.storage.preferences.memory import InMemoryIndexingPreferences
from media_index.storage.protocols import IndexingPreferences, LibraryStore, SearchIndex
from media_index.storage.search_index.memory import InMemorySearchIndex
from media_index.text import TextComposer

logger = logging.getLogger(__name__)

# Probability of picking among unwatched items when any exist
UNWATCHED_PREFERENCE = 0.8

# Items fetched per requested search result before filtering
SEARCH_FETCH_MULTIPLIER = 10


class LibraryService:
    """
    Coordinates the library store, embedding engine and search index.

    The store is the source of truth. Index updates are best effort and never
    fail an operation; embedding and lookup errors propagate to the caller.
    """

    def __init__(
        self,
        store: LibraryStore,
        embedding_engine: EmbeddingService,
        index_sync: SearchIndexSync,
        composer: Optional[TextComposer] = None,
        collection_ranker: Optional[CollectionRanker] = None,
    ):
        self.store = store
        self.embedding_engine = embedding_engine
        self.index_sync = index_sync
        self.composer = composer or TextComposer()
        self.collection_ranker = collection_ranker or CollectionRanker(store)
        self.item_lookup = ItemLookup(store)

    @classmethod
    def from_settings(
        cls,
        model: EmbeddingModel,
        settings: Optional[LibrarySettings] = None,
        search_index: Optional[SearchIndex] = None,
        preferences: Optional[IndexingPreferences] = None,
    ) -> "LibraryService":
        """
        Build a service from settings: a SQLAlchemy store at
        ``settings.database_url`` (tables created if missing), an engine
        wrapping ``model``, and index sync over ``search_index`` (in-memory
        when omitted).
        """
        settings = settings or default_settings

        store = SQLAlchemyLibraryStore(create_engine(settings.database_url))
        store.create_tables()

        index_sync = SearchIndexSync.from_settings(
            search_index or InMemorySearchIndex(),
            preferences or InMemoryIndexingPreferences.from_settings(settings),
            settings,
        )

        return cls(
            store=store,
            embedding_engine=EmbeddingEngine.from_settings(model, settings),
            index_sync=index_sync,
            composer=TextComposer.from_settings(settings),
            collection_ranker=CollectionRanker.from_settings(store, settings),
        )

    def _get_item(self, identifier: str) -> MediaItem:
        item = self.store.get_item(identifier)
        if item is None:
            raise ItemNotFoundError(identifier)
        return item

    def _get_collection(self, collection_id: str) -> Collection:
        collection = self.store.get_collection(collection_id)
        if collection is None:
            raise CollectionNotFoundError(collection_id)
        return collection

    async def add_item(self, item: MediaItem) -> str:
        """Store a new item and add it to the search index."""
        identifier = self.store.add_item(item)
        await self.index_sync.index_item(item)

        logger.info(f"Added item {identifier} ('{item.title[:50]}')")
        return identifier

    async def embed_item(self, identifier: str, ocr_text: Optional[str] = None) -> MediaItem:
        """
        Generate and store the embedding for one item.

        Args:
            identifier: Item identifier
            ocr_text: Thumbnail OCR text; stored on the item when given

        Returns:
            The updated item
        """
        item = self._get_item(identifier)

        try:
            text = self.composer.build_for_item(item, ocr_text=ocr_text)
            item.embedding = await self.embedding_engine.generate_embedding(text)
        except Exception as e:
            logger.error(f"Failed to embed item {identifier}: {e}")
            raise

        if ocr_text is not None:
            item.ocr_text = ocr_text

        self.store.update_item(item)
        logger.debug(f"Stored embedding for {identifier} ({len(item.embedding)} dimensions)")
        return item

    async def embed_missing(self, limit: Optional[int] = None) -> List[MediaItem]:
        """
        Embed items that have no embedding yet, oldest first, as one batch.

        The batch fails fast: if any text fails, nothing is stored.

        Returns:
            The updated items
        """
        items = self.store.fetch_items(order_by=(SortDescriptor("added_at", descending=False),))
        pending = [item for item in items if item.embedding is None]
        if limit is not None:
            pending = pending[:limit]

        if not pending:
            logger.debug("No items without embeddings")
            return []

        texts = [self.composer.build_for_item(item) for item in pending]
        vectors = await self.embedding_engine.generate_embeddings(texts)

        for item, vector in zip(pending, vectors):
            item.embedding = vector
            self.store.update_item(item)

        logger.info(f"Embedded {len(pending)} items")
        return pending

    async def remove_item(self, identifier: str) -> None:
        """Delete an item from the library and the search index."""
        item = self._get_item(identifier)

        self.store.delete_item(identifier)
        await self.index_sync.remove_item(item)

        logger.info(f"Removed item {identifier}")

    async def add_to_collection(self, item_id: str, collection_id: str) -> str:
        """
        Tag an item with a collection's label (once).

        Returns:
            Confirmation message, e.g. "Added Intro to Swift to Swift Programming"
        """
        item = self._get_item(item_id)
        collection = self._get_collection(collection_id)

        if collection.label not in item.topic_tags:
            item.topic_tags = [*item.topic_tags, collection.label]
            self.store.update_item(item)
            await self.index_sync.update_item(item)
            logger.debug(f"Added tag '{collection.label}' to item {item_id}")

        return f"Added {item.title} to {collection.label}"

    async def assign_collection(self, identifier: str) -> Optional[Collection]:
        """
        Add an item to the suggested collection closest to its embedding,
        generating the embedding first if needed.

        Returns:
            The chosen collection, or None if no collection matches
        """
        item = self._get_item(identifier)
        if item.embedding is None:
            item = await self.embed_item(identifier)

        collection = self.collection_ranker.best_match(item.embedding)
        if collection is None:
            logger.info(f"No matching collection for item {identifier}")
            return None

        await self.add_to_collection(identifier, collection.id)
        return collection

    async def random_item(
        self,
        collection_id: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ) -> MediaItem:
        """
        Pick a random item, optionally from one collection. Unwatched items
        are preferred with probability 0.8.

        Raises:
            CollectionNotFoundError: If ``collection_id`` does not exist
            NoItemsFoundError: If there is nothing to pick from
        """
        rng = rng or random.Random()
        items = self.store.fetch_items()

        if collection_id is not None:
            collection = self._get_collection(collection_id)
            items = [item for item in items if collection.label in item.topic_tags]

        if not items:
            logger.warning("No items found for random selection")
            raise NoItemsFoundError()

        unwatched = [item for item in items if item.watch_progress == 0]
        if unwatched and rng.random() < UNWATCHED_PREFERENCE:
            return rng.choice(unwatched)

        return rng.choice(items)

    async def search_items(self, query: str, limit: int = 10) -> List[MediaItem]:
        """Search the ``limit * 10`` most recent items and return up to ``limit`` matches."""
        return self.item_lookup.find_items(
            query, fetch_limit=limit * SEARCH_FETCH_MULTIPLIER, limit=limit
        )

    async def record_access(self, identifier: str) -> MediaItem:
        item = self._get_item(identifier)
        item.last_accessed_at = datetime.now()
        self.store.update_item(item)
        return item

    async def record_progress(self, identifier: str, seconds: float) -> MediaItem:
        """Store watch progress (clamped to the item's duration) and the watch time."""
        item = self._get_item(identifier)

        progress = max(0.0, seconds)
        if item.duration > 0:
            progress = min(progress, item.duration)

        item.watch_progress = progress
        item.last_watched_at = datetime.now()
        self.store.update_item(item)
        return item

    async def reindex_library(self) -> bool:
        """Rebuild the search index from every item in the library."""
        return await self.index_sync.reindex_all(self.store.fetch_items())
