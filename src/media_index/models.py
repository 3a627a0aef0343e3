import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from media_index.errors import InvalidItemIdentityError
from media_index.text.composer import build_text


class MediaItem(BaseModel):
    """
    A library item: either a remote video (``remote_id``) or a local file
    (``local_path``). Exactly one identity field is set and neither changes
    after construction.
    """

    model_config = ConfigDict(validate_assignment=True)

    # Identity
    remote_id: Optional[str] = Field(
        default=None, frozen=True, description="Remote source video ID (None for local files)"
    )
    local_path: Optional[str] = Field(
        default=None, frozen=True, description="Absolute path of a local file (None for remote items)"
    )

    # Metadata
    title: str
    channel_id: Optional[str] = Field(default=None, description="Remote channel ID")
    channel_title: Optional[str] = Field(default=None, description="Channel/author display name")
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list, description="Tags from the remote source")
    topic_tags: List[str] = Field(
        default_factory=list, description="AI topic / collection tags assigned in the library"
    )
    duration: float = Field(default=0.0, ge=0.0, description="Total duration in seconds")
    watch_progress: float = Field(default=0.0, ge=0.0, description="Watch progress in seconds")
    thumbnail_url: Optional[str] = None
    published_at: Optional[datetime] = None

    # Semantic data
    embedding: Optional[List[float]] = Field(
        default=None, description="Unit-norm embedding vector, None until generated"
    )
    ocr_text: Optional[str] = Field(
        default=None, description="Pre-computed OCR text from the thumbnail"
    )

    # Activity
    added_at: datetime = Field(default_factory=datetime.now)
    last_watched_at: Optional[datetime] = None
    last_accessed_at: Optional[datetime] = None

    @field_validator("remote_id", "local_path", mode="before")
    @classmethod
    def _blank_identity_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _check_identity(self) -> "MediaItem":
        has_remote = bool(self.remote_id)
        has_local = bool(self.local_path)
        if has_remote == has_local:
            raise InvalidItemIdentityError(
                "MediaItem requires exactly one of remote_id or local_path "
                f"(remote_id={self.remote_id!r}, local_path={self.local_path!r})"
            )
        return self

    @property
    def is_local(self) -> bool:
        return bool(self.local_path)

    @property
    def identifier(self) -> str:
        """Remote ID for remote items, file path for local files."""
        return self.remote_id or self.local_path  # type: ignore[return-value]

    @property
    def last_activity_at(self) -> Optional[datetime]:
        """Most recent of last access and last watch, None if neither happened."""
        times = [t for t in (self.last_accessed_at, self.last_watched_at) if t is not None]
        return max(times) if times else None

    @property
    def keywords(self) -> List[str]:
        """Topic tags followed by source tags, deduplicated case-insensitively."""
        seen = set()
        result = []
        for tag in [*self.topic_tags, *self.tags]:
            key = tag.strip().lower()
            if not key or key in seen:
                continue
            seen.add(key)
            result.append(tag.strip())
        return result

    @property
    def progress_percentage(self) -> float:
        if self.duration <= 0:
            return 0.0
        return min(self.watch_progress / self.duration, 1.0)

    def embedding_text(self, ocr_text: Optional[str] = None, **limits) -> str:
        """Compose the embedding input text from this item's metadata."""
        return build_text(
            title=self.title,
            channel=self.channel_title,
            tags=self.tags or None,
            description=self.description,
            ocr_text=ocr_text if ocr_text is not None else self.ocr_text,
            **limits,
        )


class Collection(BaseModel):
    """A topical cluster produced by the external clustering job."""

    id: str = Field(..., description="Cluster identifier")
    label: str = Field(..., description="Human-readable label, e.g. 'Swift Programming'")
    centroid: List[float] = Field(default_factory=list, description="Cluster centroid vector")
    item_count: int = Field(default=0, ge=0)
    confidence_score: float = Field(default=0.0, ge=0.0, le=1.0)
    updated_at: datetime = Field(default_factory=datetime.now)

    def similarity(self, embedding: List[float]) -> float:
        """Cosine similarity between the centroid and ``embedding``."""
        if len(self.centroid) != len(embedding):
            return 0.0

        dot_product = sum(a * b for a, b in zip(self.centroid, embedding))
        magnitude = math.sqrt(sum(a * a for a in self.centroid)) * math.sqrt(
            sum(b * b for b in embedding)
        )
        if magnitude == 0:
            return 0.0

        return dot_product / magnitude


class IndexEntry(BaseModel):
    """Projection of a MediaItem as seen by the external search index."""

    unique_id: str
    domain: str
    title: str
    keywords: Optional[List[str]] = None
    duration: float = 0.0
    content_type: str = "video"
    content_url: Optional[str] = None


@dataclass
class IndexingState:
    """
    External IDs indexed by this process.

    A best-effort cache of what the external index holds, not a source of
    truth: it is rebuilt on reindex/clear and only ever updated after the
    corresponding external call succeeded.
    """

    indexed_ids: Set[str] = field(default_factory=set)

    @property
    def count(self) -> int:
        return len(self.indexed_ids)


@dataclass(frozen=True)
class SortDescriptor:
    """Sort key for store fetches: an attribute name and a direction."""

    field: str
    descending: bool = True
