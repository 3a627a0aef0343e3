"""In-memory indexing preferences."""

import logging

logger = logging.getLogger(__name__)


class InMemoryIndexingPreferences:
    """
    In-memory implementation of the IndexingPreferences protocol.

    Holds the "index my library" switch and the indexed-item count shown to
    the user. ``reset()`` restores both defaults.
    """

    def __init__(self, indexing_enabled: bool = True, indexed_count: int = 0):
        self._indexing_enabled = indexing_enabled
        self._indexed_count = indexed_count

    @classmethod
    def from_settings(cls, settings) -> "InMemoryIndexingPreferences":
        return cls(indexing_enabled=settings.indexing_enabled)

    @property
    def indexing_enabled(self) -> bool:
        return self._indexing_enabled

    @indexing_enabled.setter
    def indexing_enabled(self, value: bool):
        self._indexing_enabled = value
        logger.info(f"Search indexing {'enabled' if value else 'disabled'}")

    @property
    def indexed_count(self) -> int:
        return self._indexed_count

    def update_indexed_count(self, count: int) -> None:
        self._indexed_count = max(0, count)

    def reset(self):
        self._indexing_enabled = True
        self._indexed_count = 0
