"""
Embedding protocols for media-index.

``EmbeddingModel`` is the opaque model collaborator wrapped by
``EmbeddingEngine``; ``EmbeddingService`` is what callers depend on.
"""

from typing import List, Optional, Protocol, Sequence

from typing_extensions import runtime_checkable


@runtime_checkable
class EmbeddingModel(Protocol):
    """
    Protocol for a raw text embedding model.

    Models are not assumed to be safe for concurrent use; the engine
    serializes all calls to a model instance.

    Example:
        >>> model = SentenceTransformerModel()
        >>> model.available
        True
        >>> len(model.vector_for("Intro to Swift"))
        512
    """

    @property
    def available(self) -> bool:
        """Whether the model can currently produce vectors."""
        ...

    @property
    def model_name(self) -> str:
        """Identifier of the model (e.g. a HuggingFace name)."""
        ...

    def vector_for(self, text: str) -> Optional[Sequence[float]]:
        """
        Produce a raw (not necessarily normalized) vector for ``text``.

        Returns:
            The vector, or None if the model could not produce one
        """
        ...


@runtime_checkable
class EmbeddingService(Protocol):
    """
    Protocol for embedding generation services.

    Enables dependency injection and mocking in callers such as
    LibraryService.
    """

    @property
    def dimension(self) -> int:
        """Length of every vector returned."""
        ...

    @property
    def is_model_available(self) -> bool:
        ...

    async def generate_embedding(self, text: str) -> List[float]:
        """
        Generate a unit-norm embedding for a single text.

        Raises:
            EmbeddingInputError: If text is empty or whitespace-only
            ModelUnavailableError: If the model is not available
            EmbeddingGenerationError: If the model produced no usable vector
        """
        ...

    async def generate_embeddings(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for several texts, in input order.

        The first failure aborts the batch and is raised.
        """
        ...

    async def preload(self) -> None:
        ...
