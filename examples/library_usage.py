"""
Example: Managing a video library with media-index

Demonstrates:
1. Composing embedding text from item metadata
2. Adding, embedding and tagging items
3. Collection suggestions and search for automation front-ends
4. Rebuilding the search index

Install required dependencies:
    pip install media-index[embeddings-transformers]
"""

import asyncio

from media_index import Collection, LibraryService, MediaItem
from media_index.config import LibrarySettings
from media_index.embeddings import SentenceTransformerModel
from media_index.lookup import CollectionRanker, ItemLookup
from media_index.text import TextComposer


def example_text_composition():
    """Example: What the embedding model actually sees."""
    print("\n=== Text Composition ===")

    item = MediaItem(
        remote_id="dQw4w9WgXcQ",
        title="Intro to Swift Concurrency \U0001F680\U0001F680\U0001F680\U0001F680",
        channel_title="Sean Allen",
        tags=["swift", "ios", "2019", "tutorial", "async await"],
        description="Subscribe for more! https://example.com\nLearn async/await in Swift.",
    )

    print(TextComposer(target_length=200).build_for_item(item))


async def example_library_service():
    """Example: End-to-end library flow with a local model."""
    print("\n=== Library Service ===")

    settings = LibrarySettings(database_url="sqlite:///:memory:")
    service = LibraryService.from_settings(SentenceTransformerModel(), settings)

    await service.embedding_engine.preload()

    identifier = await service.add_item(
        MediaItem(remote_id="abc123", title="Intro to Swift", channel_title="Sean Allen")
    )
    item = await service.embed_item(identifier)
    print(f"Embedded {item.title}: {len(item.embedding)} dimensions")

    service.store.add_collection(
        Collection(
            id="swift",
            label="Swift Programming",
            centroid=item.embedding,
            item_count=12,
            confidence_score=0.9,
        )
    )

    collection = await service.assign_collection(identifier)
    print(f"Assigned collection: {collection.label if collection else None}")

    # Lookups used by shortcuts / intents
    print(f"Suggested items: {[e.title for e in ItemLookup(service.store).suggest()]}")
    print(f"Suggested collections: {[e.label for e in CollectionRanker(service.store).suggest()]}")

    results = await service.search_items("swift", limit=5)
    print(f"Search 'swift': {[i.title for i in results]}")

    await service.reindex_library()
    print(f"Indexed items: {service.index_sync.state.count}")


async def main():
    """Run all examples."""
    print("media-index Examples")
    print("=" * 60)

    example_text_composition()
    await example_library_service()


if __name__ == "__main__":
    asyncio.run(main())
