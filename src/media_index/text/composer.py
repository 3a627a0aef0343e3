"""
Metadata text composition for embedding generation.

Combines an item's title, channel name, tags, description and OCR text into a
single cleaned string of bounded length. Components are added in priority
order and the lower-priority ones are truncated (at word boundaries) to fit:

1. Title (always kept in full)
2. Channel name, as "by <channel>"
3. Tags (filtered, deduplicated, capped)
4. Description (URLs and promotional phrases removed)
5. OCR text (lowest priority)

All functions are pure and never raise.
"""

import logging
import re
from datetime import date
from typing import Iterable, Iterator, List, Optional, Set

logger = logging.getLogger(__name__)

# Configuration constants
TARGET_TEXT_LENGTH = 1000
MAX_TAGS_FOR_EMBEDDING = 10
MAX_CONSECUTIVE_EMOJI = 3
MAX_TOTAL_EMOJI = 6

# Space reserved for separators before deciding whether a component fits
COMPONENT_SEPARATOR_BUFFER = 10
OCR_SEPARATOR_BUFFER = 5

# Minimum remaining space worth filling with a truncated component
MIN_DESCRIPTION_SPACE = 50
MIN_OCR_SPACE = 20

COMPONENT_SEPARATOR = "\n"

# Tags that carry no topical meaning
GENERIC_TAGS = frozenset(
    {
        "shorts",
        "short",
        "viral",
        "trending",
        "fyp",
        "foryou",
        "foryoupage",
        "subscribe",
        "like",
        "youtube",
        "video",
        "videos",
        "new",
        "best",
        "top",
        "2x",
        "4k",
        "hd",
    }
)

_WHITESPACE_RE = re.compile(r"\s+")
_URL_RE = re.compile(r"https?://\S+")
_WWW_RE = re.compile(r"www\.\S+")
_REPEATED_PUNCTUATION_RE = re.compile(r"([!?.])\1{2,}")
_PROMO_PHRASE_RE = re.compile(
    r"(follow|subscribe|like|share|comment)\s+(me|us|for|to|and|if|the|my|our)[^.!?]*[.!?]?",
    re.IGNORECASE,
)

# Code points with the Unicode Emoji_Presentation property
_EMOJI_RE = re.compile(
    "["
    "\U0000231a-\U0000231b\U000023e9-\U000023ec\U000023f0\U000023f3"
    "\U000025fd-\U000025fe\U00002614-\U00002615\U00002648-\U00002653"
    "\U0000267f\U00002693\U000026a1\U000026aa-\U000026ab\U000026bd-\U000026be"
    "\U000026c4-\U000026c5\U000026ce\U000026d4\U000026ea\U000026f2-\U000026f3"
    "\U000026f5\U000026fa\U000026fd\U00002705\U0000270a-\U0000270b\U00002728"
    "\U0000274c\U0000274e\U00002753-\U00002755\U00002757\U00002795-\U00002797"
    "\U000027b0\U000027bf\U00002b1b-\U00002b1c\U00002b50\U00002b55"
    "\U0001f004\U0001f0cf\U0001f18e\U0001f191-\U0001f19a\U0001f1e6-\U0001f1ff"
    "\U0001f201\U0001f21a\U0001f22f\U0001f232-\U0001f236\U0001f238-\U0001f23a"
    "\U0001f250-\U0001f251\U0001f300-\U0001f320\U0001f32d-\U0001f335"
    "\U0001f337-\U0001f37c\U0001f37e-\U0001f393\U0001f3a0-\U0001f3ca"
    "\U0001f3cf-\U0001f3d3\U0001f3e0-\U0001f3f0\U0001f3f4\U0001f3f8-\U0001f43e"
    "\U0001f440\U0001f442-\U0001f4fc\U0001f4ff-\U0001f53d\U0001f54b-\U0001f54e"
    "\U0001f550-\U0001f567\U0001f57a\U0001f595-\U0001f596\U0001f5a4"
    "\U0001f5fb-\U0001f64f\U0001f680-\U0001f6c5\U0001f6cc\U0001f6d0-\U0001f6d2"
    "\U0001f6d5-\U0001f6d7\U0001f6dc-\U0001f6df\U0001f6eb-\U0001f6ec"
    "\U0001f6f4-\U0001f6fc\U0001f7e0-\U0001f7eb\U0001f7f0\U0001f90c-\U0001f93a"
    "\U0001f93c-\U0001f945\U0001f947-\U0001f9ff\U0001fa70-\U0001fa7c"
    "\U0001fa80-\U0001fa89\U0001fa8f-\U0001fac6\U0001face-\U0001fadc"
    "\U0001fadf-\U0001fae9\U0001faf0-\U0001faf8"
    "]"
)


# One user-perceived character: a regional indicator pair (flag), or a base
# code point with its modifiers, variation selectors, keycap, tag and combining
# marks, joined to further such units by ZWJ.
_CLUSTER_EXTEND = (
    "\U0001f3fb-\U0001f3ff"  # skin tone modifiers
    "\U0000fe0e-\U0000fe0f"  # variation selectors
    "\U000020e3"  # combining enclosing keycap
    "\U000e0020-\U000e007f"  # tag characters
    "\U00000300-\U0000036f"  # combining diacritical marks
)
_CLUSTER_RE = re.compile(
    "[\U0001f1e6-\U0001f1ff]{2}"
    f"|.[{_CLUSTER_EXTEND}]*(?:\U0000200d.[{_CLUSTER_EXTEND}]*)*",
    re.DOTALL,
)


def is_emoji(char: str) -> bool:
    return bool(_EMOJI_RE.fullmatch(char))


def iter_clusters(text: str) -> Iterator[str]:
    """Split ``text`` into user-perceived characters."""
    for match in _CLUSTER_RE.finditer(text):
        yield match.group()


def limit_emoji(
    text: str,
    max_consecutive: int = MAX_CONSECUTIVE_EMOJI,
    max_total: int = MAX_TOTAL_EMOJI,
) -> str:
    """
    Drop excessive emoji while keeping some for semantic context.

    Keeps at most ``max_consecutive`` emoji per run (a run ends at any
    non-emoji character) and at most ``max_total`` emoji overall. Counting is
    per user-perceived character, so a flag or a skin-toned emoji is kept or
    dropped whole. A character is an emoji when its first code point is.

    Args:
        text: Text potentially containing emoji
        max_consecutive: Emoji kept per uninterrupted run
        max_total: Emoji kept in the whole string

    Returns:
        Text with limited emoji
    """
    kept: List[str] = []
    total = 0
    consecutive = 0

    for cluster in iter_clusters(text):
        if is_emoji(cluster[0]):
            consecutive += 1
            if consecutive <= max_consecutive and total < max_total:
                kept.append(cluster)
                total += 1
        else:
            consecutive = 0
            kept.append(cluster)

    return "".join(kept)


def clean_text(
    text: str,
    max_consecutive_emoji: int = MAX_CONSECUTIVE_EMOJI,
    max_total_emoji: int = MAX_TOTAL_EMOJI,
) -> str:
    """
    Clean general text (title, channel name, OCR text).

    Collapses whitespace runs (spaces, tabs, newlines) to a single space,
    limits emoji and trims the result.
    """
    if not isinstance(text, str):
        return ""

    cleaned = _WHITESPACE_RE.sub(" ", text)
    cleaned = limit_emoji(cleaned, max_consecutive_emoji, max_total_emoji)
    return cleaned.strip()


def clean_description(text: str, **emoji_limits) -> str:
    """
    Clean description text with more aggressive rules.

    Removes URLs (http://, https://, www.), collapses 3+ repeated punctuation
    marks to one, strips "subscribe for more"-style promotional phrases and
    then applies general cleaning.
    """
    if not isinstance(text, str):
        return ""

    cleaned = _URL_RE.sub("", text)
    cleaned = _WWW_RE.sub("", cleaned)
    cleaned = _REPEATED_PUNCTUATION_RE.sub(r"\1", cleaned)
    cleaned = _PROMO_PHRASE_RE.sub("", cleaned)

    return clean_text(cleaned, **emoji_limits)


def generic_tag_filter(today: Optional[date] = None) -> Set[str]:
    """Generic tags plus the current year and its neighbours."""
    year = (today or date.today()).year
    return set(GENERIC_TAGS) | {str(year - 1), str(year), str(year + 1)}


def process_tags(
    tags: Iterable[str],
    max_tags: int = MAX_TAGS_FOR_EMBEDDING,
    today: Optional[date] = None,
) -> List[str]:
    """
    Filter, deduplicate and cap a tag list.

    Tags are lowercased and trimmed; single-character tags, case-insensitive
    duplicates (first occurrence wins) and generic/year tags are dropped.

    Args:
        tags: Raw tag strings
        max_tags: Maximum number of tags returned
        today: Reference date for the year filter (default: today)

    Returns:
        Cleaned tags in first-occurrence order
    """
    blocked = generic_tag_filter(today)
    seen: Set[str] = set()
    result: List[str] = []

    for tag in tags or []:
        if len(result) >= max_tags:
            break
        if not isinstance(tag, str):
            continue

        cleaned = tag.lower().strip()
        if len(cleaned) <= 1 or cleaned in seen:
            continue
        seen.add(cleaned)

        if cleaned in blocked:
            continue

        result.append(cleaned)

    return result


def truncate_at_word_boundary(text: str, max_length: int) -> str:
    """
    Truncate ``text`` to at most ``max_length`` characters without cutting a word.

    Falls back to a hard cut when the first ``max_length`` characters contain
    no space at all.
    """
    if max_length <= 0:
        return ""
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    if text[max_length] == " ":
        return truncated.rstrip()

    last_space = truncated.rfind(" ")
    if last_space > 0:
        return truncated[:last_space].rstrip()

    return truncated


def build_text(
    title: str,
    channel: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
    description: Optional[str] = None,
    ocr_text: Optional[str] = None,
    *,
    target_length: int = TARGET_TEXT_LENGTH,
    max_tags: int = MAX_TAGS_FOR_EMBEDDING,
    max_consecutive_emoji: int = MAX_CONSECUTIVE_EMOJI,
    max_total_emoji: int = MAX_TOTAL_EMOJI,
    today: Optional[date] = None,
) -> str:
    """
    Build embedding input text from raw metadata components.

    Args:
        title: Item title (highest priority, never truncated by other components)
        channel: Channel or author name
        tags: Source tags
        description: Description text (truncated to fit)
        ocr_text: Pre-computed thumbnail OCR text (lowest priority)
        target_length: Maximum length of the result
        max_tags: Maximum number of tags included
        max_consecutive_emoji: Emoji kept per run
        max_total_emoji: Emoji kept per component
        today: Reference date for the year tag filter

    Returns:
        Newline-separated components, at most ``target_length`` characters.
        Empty when every input is empty.
    """
    emoji_limits = {
        "max_consecutive_emoji": max_consecutive_emoji,
        "max_total_emoji": max_total_emoji,
    }
    components: List[str] = []

    # 1. Title
    cleaned_title = clean_text(title, **emoji_limits)
    if cleaned_title:
        components.append(cleaned_title)

    # 2. Channel
    if channel:
        cleaned_channel = clean_text(channel, **emoji_limits)
        if cleaned_channel:
            components.append(f"by {cleaned_channel}")

    # 3. Tags
    if tags:
        processed_tags = process_tags(tags, max_tags=max_tags, today=today)
        if processed_tags:
            components.append(" ".join(processed_tags))

    # 4. Description
    used = len(COMPONENT_SEPARATOR.join(components))
    remaining_space = max(0, target_length - used - COMPONENT_SEPARATOR_BUFFER)

    if description and remaining_space > MIN_DESCRIPTION_SPACE:
        cleaned_description = clean_description(description, **emoji_limits)
        truncated = truncate_at_word_boundary(cleaned_description, remaining_space)
        if truncated:
            components.append(truncated)

    # 5. OCR text
    used = len(COMPONENT_SEPARATOR.join(components))
    space_for_ocr = max(0, target_length - used - OCR_SEPARATOR_BUFFER)

    if ocr_text and space_for_ocr > MIN_OCR_SPACE:
        cleaned_ocr = clean_text(ocr_text, **emoji_limits)
        truncated = truncate_at_word_boundary(cleaned_ocr, space_for_ocr)
        if truncated:
            components.append(truncated)

    result = COMPONENT_SEPARATOR.join(components)
    if len(result) > target_length:
        logger.debug(f"Composed text exceeds {target_length} chars, truncating")

    return result[:target_length]


class TextComposer:
    """
    Holds text composition limits so they can be configured once.

    Example:
        >>> composer = TextComposer.from_settings(settings)
        >>> text = composer.build(title="Intro to Swift", tags=["swift", "ios"])
    """

    def __init__(
        self,
        target_length: int = TARGET_TEXT_LENGTH,
        max_tags: int = MAX_TAGS_FOR_EMBEDDING,
        max_consecutive_emoji: int = MAX_CONSECUTIVE_EMOJI,
        max_total_emoji: int = MAX_TOTAL_EMOJI,
    ):
        self.target_length = target_length
        self.max_tags = max_tags
        self.max_consecutive_emoji = max_consecutive_emoji
        self.max_total_emoji = max_total_emoji

    @classmethod
    def from_settings(cls, settings) -> "TextComposer":
        return cls(
            target_length=settings.target_text_length,
            max_tags=settings.max_tags,
            max_consecutive_emoji=settings.max_consecutive_emoji,
            max_total_emoji=settings.max_total_emoji,
        )

    @property
    def limits(self) -> dict:
        return {
            "target_length": self.target_length,
            "max_tags": self.max_tags,
            "max_consecutive_emoji": self.max_consecutive_emoji,
            "max_total_emoji": self.max_total_emoji,
        }

    def build(
        self,
        title: str,
        channel: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        description: Optional[str] = None,
        ocr_text: Optional[str] = None,
    ) -> str:
        return build_text(
            title,
            channel=channel,
            tags=tags,
            description=description,
            ocr_text=ocr_text,
            **self.limits,
        )

    def build_for_item(self, item, ocr_text: Optional[str] = None) -> str:
        """Compose text for a MediaItem."""
        return item.embedding_text(ocr_text=ocr_text, **self.limits)
