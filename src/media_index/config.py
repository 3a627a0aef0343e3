"""
Configuration for media-index.

Values are read from environment variables prefixed with ``MEDIA_INDEX_``
(e.g. ``MEDIA_INDEX_TARGET_TEXT_LENGTH=800``). Components keep their own
module-level defaults and accept a settings object through ``from_settings``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LibrarySettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MEDIA_INDEX_", extra="ignore")

    # Embeddings
    embedding_dimension: int = Field(default=512, gt=0, description="Required vector length")
    embedding_model_name: str = Field(
        default="sentence-transformers/distiluse-base-multilingual-cased-v2",
        description="Default sentence-transformers model (512 dimensions)",
    )

    # Text composition
    target_text_length: int = Field(default=1000, gt=0)
    max_tags: int = Field(default=10, ge=0)
    max_consecutive_emoji: int = Field(default=3, ge=0)
    max_total_emoji: int = Field(default=6, ge=0)

    # Collections
    min_collection_confidence: float = Field(default=0.5, ge=0.0, le=1.0)

    # Search index
    search_domain: str = Field(default="media-index.items")
    indexing_enabled: bool = Field(default=True, description="Initial indexing preference")

    # Persistence
    database_url: str = Field(default="sqlite:///media_index.db")

    # Redis search index
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_key_prefix: str = "media-index:"


settings = LibrarySettings()
