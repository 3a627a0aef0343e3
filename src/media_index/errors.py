"""
Error taxonomy for media-index.

Embedding errors propagate to the caller. Search index errors are raised by
index collaborators and swallowed (logged) by SearchIndexSync. Lookup errors
are raised by LibraryService when a requested entity does not exist.
"""

from typing import Optional


class MediaIndexError(Exception):
    """Base class for all media-index errors."""


class InvalidItemIdentityError(MediaIndexError):
    """
    A media item must have exactly one of remote_id or local_path.

    Raised directly from MediaItem construction, not wrapped in a
    pydantic ValidationError.
    """


# Embedding errors


class EmbeddingInputError(MediaIndexError, ValueError):
    """Input text was empty or contained only whitespace."""

    def __init__(self, message: str = "Cannot generate embedding for empty text"):
        super().__init__(message)


class EmbeddingModelError(MediaIndexError):
    """Base class for failures of the underlying embedding model."""


class ModelUnavailableError(EmbeddingModelError):
    """The embedding model is not available."""

    def __init__(self, message: str = "Embedding model is not available"):
        super().__init__(message)


class EmbeddingGenerationError(EmbeddingModelError):
    """The model did not produce a usable vector."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to generate embedding: {reason}")


# Search index errors


class SearchIndexError(MediaIndexError):
    """An external search index call failed."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Search index {operation} failed{detail}")


# Lookup errors


class LibraryLookupError(MediaIndexError, LookupError):
    """Base class for missing library entities."""


class ItemNotFoundError(LibraryLookupError):
    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Item not found in library: {identifier}")


class CollectionNotFoundError(LibraryLookupError):
    def __init__(self, collection_id: str):
        self.collection_id = collection_id
        super().__init__(f"Collection not found: {collection_id}")


class NoItemsFoundError(LibraryLookupError):
    def __init__(self, message: str = "No items available"):
        super().__init__(message)
