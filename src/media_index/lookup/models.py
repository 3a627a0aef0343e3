"""
Entity projections returned by the lookup components.

These are the lightweight views an automation front-end works with: enough
to display and address an item or collection, compared by ID only.
"""

from dataclasses import dataclass, field
from datetime import datetime

from media_index.models import Collection, MediaItem


@dataclass(frozen=True)
class ItemEntity:
    """Projection of a MediaItem."""

    id: str
    title: str = field(compare=False)
    duration: float = field(default=0.0, compare=False)
    is_local: bool = field(default=False, compare=False)

    @classmethod
    def from_item(cls, item: MediaItem) -> "ItemEntity":
        return cls(
            id=item.identifier,
            title=item.title,
            duration=item.duration,
            is_local=item.is_local,
        )


@dataclass(frozen=True)
class CollectionEntity:
    """Projection of a Collection."""

    id: str
    label: str = field(compare=False)
    item_count: int = field(default=0, compare=False)
    confidence_score: float = field(default=0.0, compare=False)
    updated_at: datetime = field(default_factory=datetime.now, compare=False)

    @classmethod
    def from_collection(cls, collection: Collection) -> "CollectionEntity":
        return cls(
            id=collection.id,
            label=collection.label,
            item_count=collection.item_count,
            confidence_score=collection.confidence_score,
            updated_at=collection.updated_at,
        )

    @property
    def subtitle(self) -> str:
        return "1 item" if self.item_count == 1 else f"{self.item_count} items"
