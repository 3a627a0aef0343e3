"""
Entity lookup for automation front-ends.

- ItemLookup: resolve, suggest and search library items
- CollectionRanker: resolve, suggest, rank and search collections
"""

from media_index.lookup.collections import MIN_CONFIDENCE_SCORE, CollectionRanker
from media_index.lookup.items import ItemLookup, matches_query
from media_index.lookup.models import CollectionEntity, ItemEntity

__all__ = [
    "CollectionEntity",
    "CollectionRanker",
    "ItemEntity",
    "ItemLookup",
    "MIN_CONFIDENCE_SCORE",
    "matches_query",
]
