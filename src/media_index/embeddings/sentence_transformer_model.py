"""sentence-transformers model adapter for media-index."""

import importlib.util
import logging
from typing import List, Optional

logger = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "sentence-transformers/distiluse-base-multilingual-cased-v2"


class SentenceTransformerModel:
    """
    Local sentence embedding model backed by sentence-transformers.

    The model is loaded lazily on the first ``vector_for`` call (or through
    ``EmbeddingEngine.preload``). The default model produces 512-dimension
    sentence vectors.

    Supported models include any sentence-transformers model; pick one whose
    output dimension matches the engine's ``dimension``:
    - sentence-transformers/distiluse-base-multilingual-cased-v2 (512 dims) - Default
    - sentence-transformers/clip-ViT-B-32-multilingual-v1 (512 dims)

    Example:
        >>> model = SentenceTransformerModel(device="cpu")
        >>> model.available
        True
        >>> len(model.vector_for("Cooking pasta at home"))
        512
    """

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL_NAME,
        device: Optional[str] = None,
        cache_folder: Optional[str] = None,
        trust_remote_code: bool = False,
    ):
        """
        Initialize the adapter without loading the model.

        Args:
            model_name: HuggingFace model identifier
            device: Device for computation ("cuda", "cpu", or None for auto)
            cache_folder: Directory for model cache (None = default ~/.cache)
            trust_remote_code: Allow custom model code execution
        """
        self._model_name = model_name
        self._device = device
        self._cache_folder = cache_folder
        self._trust_remote_code = trust_remote_code
        self._model = None
        self._load_failed = False

        if importlib.util.find_spec("sentence_transformers") is None:
            logger.warning(
                "sentence-transformers is not installed. "
                "Install with: pip install media-index[embeddings-transformers]"
            )
            self._load_failed = True

    @property
    def available(self) -> bool:
        return not self._load_failed

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    def _load(self):
        from sentence_transformers import SentenceTransformer

        logger.info(f"Loading sentence-transformers model: {self._model_name}")
        try:
            self._model = SentenceTransformer(
                self._model_name,
                device=self._device,
                cache_folder=self._cache_folder,
                trust_remote_code=self._trust_remote_code,
            )
        except Exception as e:
            self._load_failed = True
            logger.error(f"Failed to load model {self._model_name}: {e}")
            raise

        logger.info(
            f"Model loaded: {self._model_name} "
            f"({self._model.get_sentence_embedding_dimension()} dimensions)"
        )

    def vector_for(self, text: str) -> Optional[List[float]]:
        """Encode ``text``; normalization is left to the engine."""
        if self._model is None:
            self._load()

        embedding = self._model.encode(
            text,
            normalize_embeddings=False,
            show_progress_bar=False,
        )
        if embedding is None or len(embedding) == 0:
            return None

        return embedding.tolist()
