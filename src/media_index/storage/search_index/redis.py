"""
Redis search index implementation.

Stores index entries in Redis so they survive restarts and can be shared by
several processes (or read by a separate search service).

Key layout (with the default prefix):
- ``media-index:entry:<domain>:<unique_id>``: hash holding one entry
- ``media-index:domain:<domain>``: set of unique IDs under a domain
- ``media-index:domains``: set of known domains
"""

import asyncio
import json
import logging
from typing import Dict, List, Optional, Set

from media_index.models import IndexEntry

try:
    import redis
except ImportError:
    redis = None  # type: ignore

logger = logging.getLogger(__name__)


class RedisSearchIndex:
    """
    Redis implementation of the SearchIndex protocol.

    Uses the synchronous redis client; calls run in a worker thread so the
    event loop is never blocked. Batch writes go through a single pipeline.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        key_prefix: str = "media-index:",
    ):
        """
        Initialize the Redis index.

        Args:
            host: Redis host
            port: Redis port
            db: Redis database number
            key_prefix: Prefix for Redis keys (default: "media-index:")
        """
        if redis is None:
            raise ImportError(
                "redis package is required for RedisSearchIndex. "
                "Install with: pip install media-index[redis]"
            )

        self.client = redis.Redis(host=host, port=port, db=db, decode_responses=True)
        self._key_prefix = key_prefix

        # Test connection
        try:
            self.client.ping()
            logger.info(f"RedisSearchIndex initialized (host={host}:{port}, db={db})")
        except redis.ConnectionError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    @classmethod
    def from_settings(cls, settings) -> "RedisSearchIndex":
        return cls(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            key_prefix=settings.redis_key_prefix,
        )

    def _entry_key(self, domain: str, unique_id: str) -> str:
        return f"{self._key_prefix}entry:{domain}:{unique_id}"

    def _domain_key(self, domain: str) -> str:
        return f"{self._key_prefix}domain:{domain}"

    @property
    def _domains_key(self) -> str:
        return f"{self._key_prefix}domains"

    @staticmethod
    def _to_mapping(entry: IndexEntry) -> Dict[str, str]:
        mapping = {
            "unique_id": entry.unique_id,
            "domain": entry.domain,
            "title": entry.title,
            "duration": str(entry.duration),
            "content_type": entry.content_type,
        }
        if entry.keywords is not None:
            mapping["keywords"] = json.dumps(entry.keywords)
        if entry.content_url is not None:
            mapping["content_url"] = entry.content_url
        return mapping

    # Sync implementations (run in a worker thread)

    def _index_batch(self, entries: List[IndexEntry]) -> None:
        pipeline = self.client.pipeline()

        for entry in entries:
            key = self._entry_key(entry.domain, entry.unique_id)
            # Replace, so attributes dropped since the last write disappear
            pipeline.delete(key)
            pipeline.hset(key, mapping=self._to_mapping(entry))
            pipeline.sadd(self._domain_key(entry.domain), entry.unique_id)
            pipeline.sadd(self._domains_key, entry.domain)

        pipeline.execute()
        logger.debug(f"Indexed {len(entries)} entries")

    def _delete_by_ids(self, unique_ids: List[str]) -> None:
        domains = self.client.smembers(self._domains_key)
        pipeline = self.client.pipeline()

        for domain in domains:
            for unique_id in unique_ids:
                pipeline.delete(self._entry_key(domain, unique_id))
            if unique_ids:
                pipeline.srem(self._domain_key(domain), *unique_ids)

        pipeline.execute()
        logger.debug(f"Deleted {len(unique_ids)} entries")

    def _delete_by_domain(self, domain: str) -> None:
        domain_key = self._domain_key(domain)
        unique_ids = self.client.smembers(domain_key)

        pipeline = self.client.pipeline()
        for unique_id in unique_ids:
            pipeline.delete(self._entry_key(domain, unique_id))
        pipeline.delete(domain_key)
        pipeline.srem(self._domains_key, domain)
        pipeline.execute()

        logger.info(f"Cleared {len(unique_ids)} entries from domain {domain}")

    # SearchIndex protocol

    async def index_batch(self, entries: List[IndexEntry]) -> None:
        await asyncio.to_thread(self._index_batch, entries)

    async def delete_by_ids(self, unique_ids: List[str]) -> None:
        await asyncio.to_thread(self._delete_by_ids, unique_ids)

    async def delete_by_domain(self, domain: str) -> None:
        await asyncio.to_thread(self._delete_by_domain, domain)

    # Inspection

    def get(self, unique_id: str, domain: str) -> Optional[IndexEntry]:
        """Read a single entry back, None if absent."""
        data = self.client.hgetall(self._entry_key(domain, unique_id))
        if not data:
            return None

        return IndexEntry(
            unique_id=data["unique_id"],
            domain=data["domain"],
            title=data["title"],
            keywords=json.loads(data["keywords"]) if "keywords" in data else None,
            duration=float(data.get("duration", 0.0)),
            content_type=data.get("content_type", "video"),
            content_url=data.get("content_url"),
        )

    def ids(self, domain: str) -> Set[str]:
        return set(self.client.smembers(self._domain_key(domain)))
