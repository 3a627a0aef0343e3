"""
Embedding generation for media-index.

Provides the EmbeddingEngine (validation, normalization, serialized model
access) and model adapters:
- SentenceTransformerModel: local sentence-transformers model
- OpenAIEmbeddingModel: OpenAI API embeddings
"""

from media_index.embeddings.engine import EMBEDDING_DIMENSION, EmbeddingEngine, normalize_vector
from media_index.embeddings.protocol import EmbeddingModel, EmbeddingService
from media_index.embeddings.sentence_transformer_model import SentenceTransformerModel

__all__ = [
    "EMBEDDING_DIMENSION",
    "EmbeddingEngine",
    "EmbeddingModel",
    "EmbeddingService",
    "SentenceTransformerModel",
    "normalize_vector",
]

# Optional adapters (import only if dependencies available)
try:
    from media_index.embeddings.openai_model import OpenAIEmbeddingModel  # noqa: F401

    __all__.append("OpenAIEmbeddingModel")
except ImportError:
    pass
