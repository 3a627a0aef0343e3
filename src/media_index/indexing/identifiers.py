"""
Stable external identifiers for search index entries.

Identifiers must be identical across process restarts, so local files are
keyed by a SHA-256 digest of their path rather than by Python's ``hash()``.
"""

import hashlib
from pathlib import PurePath
from urllib.parse import quote

from media_index.models import MediaItem

REMOTE_PREFIX = "remote-"
LOCAL_PREFIX = "local-"
UNKNOWN_PREFIX = "unknown-"

PATH_HASH_LENGTH = 12

# Characters left unescaped in a URL path segment besides alphanumerics and "-._~"
_PATH_SAFE_CHARS = "!$&'()*+,;=:@"


def path_digest(path: str) -> str:
    """First 12 hex characters of the SHA-256 digest of ``path``."""
    return hashlib.sha256(path.encode("utf-8")).hexdigest()[:PATH_HASH_LENGTH]


def unique_external_id(item: MediaItem) -> str:
    """
    External index ID for an item.

    - Remote items: ``remote-<remote_id>``
    - Local files: ``local-<percent-encoded filename>-<path digest>``

    Example:
        >>> unique_external_id(MediaItem(remote_id="dQw4w9WgXcQ", title="Intro"))
        'remote-dQw4w9WgXcQ'
    """
    if item.remote_id:
        return f"{REMOTE_PREFIX}{item.remote_id}"

    if item.local_path:
        filename = quote(PurePath(item.local_path).name, safe=_PATH_SAFE_CHARS)
        return f"{LOCAL_PREFIX}{filename}-{path_digest(item.local_path)}"

    # Unreachable for validated items
    return f"{UNKNOWN_PREFIX}{item.identifier}"


def normalize_external_id(identifier: str) -> str:
    """Prefix a bare remote ID; already-prefixed IDs are returned unchanged."""
    if identifier.startswith((REMOTE_PREFIX, LOCAL_PREFIX)):
        return identifier
    return f"{REMOTE_PREFIX}{identifier}"
