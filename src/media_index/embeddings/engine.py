"""
Embedding engine: validation, normalization and serialized access to a model.
"""

import asyncio
import logging
from typing import List, Sequence

import numpy as np

from media_index.embeddings.protocol import EmbeddingModel
from media_index.errors import (
    EmbeddingGenerationError,
    EmbeddingInputError,
    ModelUnavailableError,
)

logger = logging.getLogger(__name__)

EMBEDDING_DIMENSION = 512
PRELOAD_TEXT = "preload"


def normalize_vector(vector: Sequence[float]) -> List[float]:
    """L2-normalize ``vector``; a zero vector is returned unchanged."""
    array = np.asarray(vector, dtype=np.float32)
    norm = float(np.linalg.norm(array))
    if norm > 0:
        array = array / norm
    return array.tolist()


class EmbeddingEngine:
    """
    Wraps an ``EmbeddingModel`` and produces unit-norm vectors of a fixed
    dimension.

    Every call on an instance runs under one ``asyncio.Lock``: the model is
    invoked strictly one text at a time, in call order. Batches hold the lock
    for their whole duration and fail fast on the first error.

    Example:
        >>> engine = EmbeddingEngine(SentenceTransformerModel())
        >>> vector = await engine.generate_embedding("Intro to Swift\\nby Sean Allen")
        >>> len(vector)
        512
    """

    def __init__(self, model: EmbeddingModel, dimension: int = EMBEDDING_DIMENSION):
        """
        Initialize the engine.

        Args:
            model: The embedding model to wrap
            dimension: Required vector length (default: 512)
        """
        self._model = model
        self._dimension = dimension
        self._lock = asyncio.Lock()

        if model.available:
            logger.info(f"EmbeddingEngine initialized: {model.model_name} ({dimension} dimensions)")
        else:
            logger.warning(f"Embedding model unavailable: {model.model_name}")

    @classmethod
    def from_settings(cls, model: EmbeddingModel, settings) -> "EmbeddingEngine":
        return cls(model, dimension=settings.embedding_dimension)

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model.model_name

    @property
    def is_model_available(self) -> bool:
        return bool(self._model.available)

    async def generate_embedding(self, text: str) -> List[float]:
        """
        Generate a unit-norm embedding for a single text.

        Args:
            text: Input text; leading/trailing whitespace is ignored

        Returns:
            Vector of ``dimension`` floats, unit length unless all zeros

        Raises:
            EmbeddingInputError: If text is empty or whitespace-only
            ModelUnavailableError: If the model is not available
            EmbeddingGenerationError: If the model produced no usable vector
        """
        async with self._lock:
            vector = await self._generate(text)

        logger.debug(f"Generated {len(vector)}-dim embedding for text ({len(text)} chars)")
        return vector

    async def generate_embeddings(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for several texts, sequentially and in input order.

        Args:
            texts: Input texts

        Returns:
            One vector per text, same order as input

        Raises:
            The first error encountered; later texts are not attempted.
        """
        results: List[List[float]] = []

        async with self._lock:
            for text in texts:
                results.append(await self._generate(text))

        logger.info(f"Generated {len(results)} embeddings in batch")
        return results

    async def preload(self) -> None:
        """
        Force the model to load by requesting a throwaway vector.

        Raises:
            ModelUnavailableError: If the model is not available
        """
        async with self._lock:
            if not self._model.available:
                raise ModelUnavailableError()

            await asyncio.to_thread(self._model.vector_for, PRELOAD_TEXT)

        logger.info(f"Embedding model preloaded: {self._model.model_name}")

    async def _generate(self, text: str) -> List[float]:
        """Generate one embedding. Caller must hold the lock."""
        cleaned = text.strip() if isinstance(text, str) else ""
        if not cleaned:
            raise EmbeddingInputError()

        if not self._model.available:
            raise ModelUnavailableError()

        try:
            raw = await asyncio.to_thread(self._model.vector_for, cleaned)
        except Exception as e:
            logger.error(f"Embedding model raised for input ({len(cleaned)} chars): {e}")
            raise EmbeddingGenerationError(str(e)) from e

        if raw is None:
            logger.error(f"Embedding model returned no vector for input ({len(cleaned)} chars)")
            raise EmbeddingGenerationError("model returned no vector for input")

        if len(raw) != self._dimension:
            raise EmbeddingGenerationError(
                f"expected {self._dimension} dimensions, got {len(raw)}"
            )

        if not np.all(np.isfinite(np.asarray(raw, dtype=np.float64))):
            raise EmbeddingGenerationError("model returned non-finite values")

        return normalize_vector(raw)
