"""
Storage protocols and collaborator implementations.

Provides protocol definitions for the library store, the external search
index and the indexing preferences. Implementations can use various backends
(in-memory, SQLAlchemy, Redis) as long as they satisfy the protocol interface.
"""

from media_index.storage.protocols import IndexingPreferences, LibraryStore, SearchIndex

__all__ = [
    "LibraryStore",
    "SearchIndex",
    "IndexingPreferences",
]

# Library storage implementations
try:
    from media_index.storage.library.memory import InMemoryLibraryStore  # noqa: F401

    __all__.append("InMemoryLibraryStore")
except ImportError:
    pass

try:
    from media_index.storage.library.sqlalchemy import SQLAlchemyLibraryStore  # noqa: F401

    __all__.append("SQLAlchemyLibraryStore")
except ImportError:
    pass

# Search index implementations
try:
    from media_index.storage.search_index.memory import InMemorySearchIndex  # noqa: F401

    __all__.append("InMemorySearchIndex")
except ImportError:
    pass

try:
    from media_index.storage.search_index.redis import RedisSearchIndex  # noqa: F401

    __all__.append("RedisSearchIndex")
except ImportError:
    pass

# Preferences
try:
    from media_index.storage.preferences.memory import InMemoryIndexingPreferences  # noqa: F401

    __all__.append("InMemoryIndexingPreferences")
except ImportError:
    pass
