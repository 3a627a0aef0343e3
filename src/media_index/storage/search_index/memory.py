"""
In-memory search index implementation.

Stands in for the platform search index in tests and single-process setups.
Supports failure injection so callers' error handling can be exercised.
"""

import logging
from typing import Dict, List, Optional, Set, Tuple

from media_index.models import IndexEntry

logger = logging.getLogger(__name__)


class InMemorySearchIndex:
    """
    In-memory implementation of the SearchIndex protocol.

    Entries are keyed by ``(unique_id, domain)``. Every call is recorded in
    ``calls`` as ``(operation, argument)``.

    Example:
        >>> index = InMemorySearchIndex()
        >>> index.fail_with = RuntimeError("index offline")  # next calls raise
    """

    def __init__(self, fail_with: Optional[Exception] = None):
        """
        Args:
            fail_with: Exception raised by every operation while set
        """
        self._entries: Dict[Tuple[str, str], IndexEntry] = {}
        self.fail_with = fail_with
        self.calls: List[Tuple[str, object]] = []

    def _check_failure(self, operation: str):
        if self.fail_with is not None:
            logger.debug(f"Injected failure for {operation}: {self.fail_with}")
            raise self.fail_with

    async def index_batch(self, entries: List[IndexEntry]) -> None:
        self.calls.append(("index_batch", [entry.unique_id for entry in entries]))
        self._check_failure("index_batch")

        for entry in entries:
            self._entries[(entry.unique_id, entry.domain)] = entry.model_copy(deep=True)

        logger.debug(f"Indexed {len(entries)} entries")

    async def delete_by_ids(self, unique_ids: List[str]) -> None:
        self.calls.append(("delete_by_ids", list(unique_ids)))
        self._check_failure("delete_by_ids")

        targets = set(unique_ids)
        for key in [key for key in self._entries if key[0] in targets]:
            del self._entries[key]

    async def delete_by_domain(self, domain: str) -> None:
        self.calls.append(("delete_by_domain", domain))
        self._check_failure("delete_by_domain")

        for key in [key for key in self._entries if key[1] == domain]:
            del self._entries[key]

    def get(self, unique_id: str, domain: str) -> Optional[IndexEntry]:
        return self._entries.get((unique_id, domain))

    def ids(self, domain: Optional[str] = None) -> Set[str]:
        """Unique IDs currently indexed, optionally restricted to one domain."""
        return {uid for uid, entry_domain in self._entries if domain in (None, entry_domain)}

    def __len__(self) -> int:
        return len(self._entries)
