"""
Versioned schema for persisted media items.

Each schema version is an entry in ``SchemaVersion`` together with the set of
fields its records carry. Upgrades are explicit functions between adjacent
versions, applied in order when an older record is loaded:

- V1 -> V2: adds ``last_accessed_at`` (None for existing records)
"""

import logging
from enum import IntEnum
from typing import Any, Callable, Dict, FrozenSet

logger = logging.getLogger(__name__)


class SchemaVersion(IntEnum):
    V1 = 1
    V2 = 2


CURRENT_SCHEMA_VERSION = SchemaVersion.V2

Record = Dict[str, Any]

_V1_FIELDS: FrozenSet[str] = frozenset(
    {
        "remote_id",
        "local_path",
        "title",
        "channel_id",
        "channel_title",
        "description",
        "tags",
        "topic_tags",
        "duration",
        "watch_progress",
        "thumbnail_url",
        "published_at",
        "embedding",
        "ocr_text",
        "added_at",
        "last_watched_at",
    }
)

SCHEMA_FIELDS: Dict[SchemaVersion, FrozenSet[str]] = {
    SchemaVersion.V1: _V1_FIELDS,
    SchemaVersion.V2: _V1_FIELDS | {"last_accessed_at"},
}


def _upgrade_v1_to_v2(record: Record) -> Record:
    upgraded = dict(record)
    upgraded.setdefault("last_accessed_at", None)
    return upgraded


# Keyed by the version being upgraded *from*
UPGRADES: Dict[SchemaVersion, Callable[[Record], Record]] = {
    SchemaVersion.V1: _upgrade_v1_to_v2,
}


def upgrade_record(record: Record, version: int) -> Record:
    """
    Upgrade a stored record from ``version`` to the current schema.

    Args:
        record: Field dictionary as stored
        version: Schema version the record was written with

    Returns:
        A new record with every field of the current schema

    Raises:
        ValueError: If ``version`` is unknown (e.g. written by a newer release)
    """
    current = SchemaVersion(version)

    while current < CURRENT_SCHEMA_VERSION:
        record = UPGRADES[current](record)
        logger.debug(f"Upgraded record from schema {current.name}")
        current = SchemaVersion(current + 1)

    return record


def snapshot(record: Record, version: SchemaVersion = CURRENT_SCHEMA_VERSION) -> Record:
    """Restrict a record to the fields of ``version``."""
    fields = SCHEMA_FIELDS[version]
    return {key: value for key, value in record.items() if key in fields}
