"""
Search index synchronization.

Keeps an external search index in step with the library. Indexing is best
effort: every failure of the external index is logged and swallowed so a
broken index never breaks the item-management flow that triggered it.
"""

import asyncio
import logging
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional

from media_index.errors import SearchIndexError
from media_index.indexing.identifiers import normalize_external_id, unique_external_id
from media_index.models import IndexEntry, IndexingState, MediaItem
from media_index.storage.protocols import IndexingPreferences, SearchIndex

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN = "media-index.items"
CONTENT_TYPE = "video"


class SearchIndexSync:
    """
    Serialized owner of the indexed-ID state for one search index domain.

    All operations on an instance run one at a time under an
    ``asyncio.Lock``. The local ``IndexingState`` is a best-effort cache of
    what the external index holds: it changes only after the corresponding
    external call has returned successfully, so a failed or cancelled call
    leaves it untouched.

    Example:
        >>> sync = SearchIndexSync(InMemorySearchIndex(), InMemoryIndexingPreferences())
        >>> await sync.index_item(item)
        True
        >>> sync.state.count
        1
    """

    def __init__(
        self,
        index: SearchIndex,
        preferences: IndexingPreferences,
        domain: str = DEFAULT_DOMAIN,
    ):
        """
        Args:
            index: External search index
            preferences: Indexing switch and indexed-count sink
            domain: Domain tag under which all entries are indexed
        """
        self.index = index
        self.preferences = preferences
        self.domain = domain
        self.last_error: Optional[SearchIndexError] = None

        self._indexed_ids: FrozenSet[str] = frozenset()
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls, index: SearchIndex, preferences: IndexingPreferences, settings
    ) -> "SearchIndexSync":
        return cls(index, preferences, domain=settings.search_domain)

    # State

    @property
    def indexed_ids(self) -> FrozenSet[str]:
        return self._indexed_ids

    @property
    def state(self) -> IndexingState:
        """Snapshot of the current indexing state."""
        return IndexingState(indexed_ids=set(self._indexed_ids))

    def is_indexed(self, item: MediaItem) -> bool:
        return unique_external_id(item) in self._indexed_ids

    def _commit(self, indexed_ids: FrozenSet[str], count: Optional[int] = None):
        self._indexed_ids = indexed_ids
        self.preferences.update_indexed_count(len(indexed_ids) if count is None else count)

    def _record_failure(self, operation: str, cause: Exception) -> bool:
        self.last_error = SearchIndexError(operation, cause)
        logger.error(str(self.last_error))
        return False

    # Entries

    def build_index_entry(self, item: MediaItem) -> Optional[IndexEntry]:
        """
        Project an item onto an index entry.

        Returns None only when the entry cannot be constructed.
        """
        try:
            content_url = None
            if item.is_local:
                content_url = Path(item.local_path).absolute().as_uri()

            return IndexEntry(
                unique_id=unique_external_id(item),
                domain=self.domain,
                title=item.title,
                keywords=item.keywords or None,
                duration=item.duration,
                content_type=CONTENT_TYPE,
                content_url=content_url,
            )
        except ValueError as e:
            logger.error(f"Failed to build index entry for {item.identifier}: {e}")
            return None

    # Operations

    async def index_item(self, item: MediaItem) -> bool:
        """
        Index (or re-index) a single item.

        Returns:
            True if the item was submitted and recorded, False if indexing is
            disabled or the external call failed
        """
        async with self._lock:
            if not self.preferences.indexing_enabled:
                logger.debug(f"Search indexing disabled, skipping: {item.identifier}")
                return False

            entry = self.build_index_entry(item)
            if entry is None:
                return False

            try:
                await self.index.index_batch([entry])
            except Exception as e:
                return self._record_failure("index", e)

            self._commit(self._indexed_ids | {entry.unique_id})
            logger.info(f"Indexed item '{item.title[:50]}' [{entry.unique_id}]")
            return True

    async def update_item(self, item: MediaItem) -> bool:
        return await self.index_item(item)

    async def remove_item(self, item: MediaItem) -> bool:
        return await self.remove_item_by_id(unique_external_id(item))

    async def remove_item_by_id(self, identifier: str) -> bool:
        """Remove an entry; bare remote IDs are prefixed before the delete."""
        unique_id = normalize_external_id(identifier)

        async with self._lock:
            try:
                await self.index.delete_by_ids([unique_id])
            except Exception as e:
                return self._record_failure("delete", e)

            self._commit(self._indexed_ids - {unique_id})
            logger.info(f"Removed item from search index: {unique_id}")
            return True

    async def reindex_all(self, items: Iterable[MediaItem]) -> bool:
        """
        Replace everything under the domain with entries for ``items``.

        An empty ``items`` is a no-op: the external index is not touched.

        Returns:
            True if the index was cleared and rebuilt
        """
        entries: Dict[str, IndexEntry] = {}
        for item in items:
            entry = self.build_index_entry(item)
            if entry is not None:
                entries[entry.unique_id] = entry

        if not entries:
            logger.info("No items to reindex")
            return False

        batch: List[IndexEntry] = list(entries.values())

        async with self._lock:
            try:
                await self.index.delete_by_domain(self.domain)
            except Exception as e:
                return self._record_failure("clear", e)

            self._commit(frozenset())

            try:
                await self.index.index_batch(batch)
            except Exception as e:
                return self._record_failure("reindex", e)

            self._commit(frozenset(entries), count=len(batch))
            logger.info(f"Reindexed {len(batch)} items")
            return True

    async def clear_all(self) -> bool:
        """Delete every entry under the domain and reset the state."""
        async with self._lock:
            try:
                await self.index.delete_by_domain(self.domain)
            except Exception as e:
                return self._record_failure("clear", e)

            self._commit(frozenset())
            logger.info("Cleared all items from search index")
            return True
