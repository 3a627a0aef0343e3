"""
media-index: semantic indexing and lookup for a personal video library.

Core components:
- text: Metadata text composition for embeddings
- embeddings: Embedding engine and model adapters
- lookup: Item and collection resolution for automation front-ends
- indexing: Best-effort sync to an external search index
- storage: Protocols and implementations for library store, search index, preferences
- models: Core data models (MediaItem, Collection, IndexEntry, etc.)
"""

__version__ = "0.1.0"

from media_index.models import (
    Collection,
    IndexEntry,
    IndexingState,
    MediaItem,
    SortDescriptor,
)
from media_index.library_service import LibraryService

__all__ = [
    "__version__",
    # Models
    "Collection",
    "IndexEntry",
    "IndexingState",
    "MediaItem",
    "SortDescriptor",
    "LibraryService",
]
