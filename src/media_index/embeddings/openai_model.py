"""OpenAI embedding model adapter for media-index."""

import logging
import os
from typing import List, Optional

logger = logging.getLogger(__name__)


class OpenAIEmbeddingModel:
    """
    Embedding model using OpenAI's embedding API.

    ``text-embedding-3-small`` and ``text-embedding-3-large`` accept a
    ``dimensions`` argument, so they can produce the library's 512-dimension
    vectors directly.

    Also compatible with OpenAI-compatible APIs (Azure, OpenRouter, etc.)

    Example:
        >>> model = OpenAIEmbeddingModel(api_key="sk-...")
        >>> len(model.vector_for("Cooking pasta at home"))
        512
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        dimensions: int = 512,
        timeout: float = 30.0,
        max_retries: int = 3,
    ):
        """
        Initialize OpenAI embedding model.

        Args:
            model: OpenAI model name (default: text-embedding-3-small)
            api_key: OpenAI API key (None = use OPENAI_API_KEY env var)
            base_url: Custom endpoint (None = official OpenAI, or Azure/OpenRouter)
            dimensions: Output dimension (default: 512)
            timeout: Request timeout in seconds
            max_retries: Number of retry attempts for failed requests
        """
        try:
            from openai import OpenAI
        except ImportError as e:
            raise ImportError(
                "openai is required for OpenAIEmbeddingModel. "
                "Install with: pip install media-index[embeddings-openai]"
            ) from e

        self._model = model
        self._dimensions = dimensions
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")

        self._client = None
        if not self._api_key:
            logger.warning("No OpenAI API key configured; embedding model unavailable")
            return

        self._client = OpenAI(
            api_key=self._api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )

        logger.info(f"OpenAI embedding model initialized: {model} ({dimensions} dimensions)")

    @property
    def available(self) -> bool:
        return bool(self._api_key)

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def vector_for(self, text: str) -> Optional[List[float]]:
        """Request a single embedding; None if the response holds no data."""
        if self._client is None:
            raise RuntimeError("OpenAI client is not configured (missing API key)")

        response = self._client.embeddings.create(
            model=self._model,
            input=text,
            dimensions=self._dimensions,
        )
        if not response.data:
            return None

        return response.data[0].embedding
