"""Text preparation for embedding generation."""

from media_index.text.composer import (
    TextComposer,
    build_text,
    clean_description,
    clean_text,
    process_tags,
    truncate_at_word_boundary,
)

__all__ = [
    "TextComposer",
    "build_text",
    "clean_text",
    "clean_description",
    "process_tags",
    "truncate_at_word_boundary",
]
