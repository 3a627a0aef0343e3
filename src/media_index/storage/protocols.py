"""
Collaborator protocol definitions.

These protocols define what the core components need from the surrounding
application: a library store (persistence), an external search index, and
the user's indexing preferences. They are implementation-agnostic; in-memory,
SQLAlchemy and Redis implementations live alongside.
"""

from typing import List, Optional, Protocol, Sequence

from media_index.models import Collection, IndexEntry, MediaItem, SortDescriptor


class LibraryStore(Protocol):
    """
    Protocol for library persistence.

    Fetches return whole entities sorted by the given descriptors and capped
    at ``limit``; any further filtering (substring, tag matching) is done in
    memory by the caller.
    """

    def add_item(self, item: MediaItem) -> str:
        """
        Add an item to the library.

        Args:
            item: The item to store

        Returns:
            The item's identifier
        """
        ...

    def get_item(self, identifier: str) -> Optional[MediaItem]:
        """
        Retrieve an item by identifier (remote ID or local path).

        Returns:
            The item if found, None otherwise
        """
        ...

    def update_item(self, item: MediaItem) -> bool:
        """
        Replace a stored item (matched by identifier).

        Returns:
            True if the item existed and was updated, False otherwise
        """
        ...

    def delete_item(self, identifier: str) -> bool:
        """
        Delete an item.

        Returns:
            True if the item existed and was deleted, False otherwise
        """
        ...

    def fetch_items(
        self,
        order_by: Sequence[SortDescriptor] = (),
        limit: Optional[int] = None,
    ) -> List[MediaItem]:
        """
        Fetch items sorted by ``order_by`` (first descriptor is the primary
        key, None values sort last) and capped at ``limit``.
        """
        ...

    def add_collection(self, collection: Collection) -> str:
        """Add or replace a collection, returning its ID."""
        ...

    def get_collection(self, collection_id: str) -> Optional[Collection]:
        ...

    def delete_collection(self, collection_id: str) -> bool:
        ...

    def fetch_collections(
        self,
        order_by: Sequence[SortDescriptor] = (),
        limit: Optional[int] = None,
    ) -> List[Collection]:
        """Fetch collections sorted by ``order_by`` and capped at ``limit``."""
        ...


class SearchIndex(Protocol):
    """
    Protocol for an external full-text search index.

    Entries are keyed by ``(unique_id, domain)``. Implementations raise on
    failure; SearchIndexSync wraps failures in SearchIndexError.
    """

    async def index_batch(self, entries: List[IndexEntry]) -> None:
        """Add or replace the given entries."""
        ...

    async def delete_by_ids(self, unique_ids: List[str]) -> None:
        """Delete entries by unique ID (missing IDs are ignored)."""
        ...

    async def delete_by_domain(self, domain: str) -> None:
        """Delete every entry under ``domain``."""
        ...


class IndexingPreferences(Protocol):
    """
    Protocol for the user's search indexing preference and the
    externally visible indexed-item count.
    """

    @property
    def indexing_enabled(self) -> bool:
        ...

    @property
    def indexed_count(self) -> int:
        ...

    def update_indexed_count(self, count: int) -> None:
        """Record the number of items currently indexed."""
        ...
