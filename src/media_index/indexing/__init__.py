"""
External search index synchronization.

- SearchIndexSync: serialized, best-effort sync of library items to a SearchIndex
- unique_external_id / normalize_external_id: stable index identifiers
"""

from media_index.indexing.identifiers import (
    LOCAL_PREFIX,
    REMOTE_PREFIX,
    normalize_external_id,
    unique_external_id,
)
from media_index.indexing.sync import SearchIndexSync

__all__ = [
    "LOCAL_PREFIX",
    "REMOTE_PREFIX",
    "SearchIndexSync",
    "normalize_external_id",
    "unique_external_id",
]
