"""
SQLAlchemy-based library storage implementation.

Provides a persistent backend for media items and collections that works with
any SQLAlchemy-compatible database (SQLite, PostgreSQL, MySQL, etc.).

Items are stored as a versioned JSON record plus the columns needed for
lookup and sorting. Records written by an older release are upgraded on load
through ``media_index.storage.library.schema``.
"""

import json
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import Column, DateTime, Engine, Float, Integer, String, Text
from sqlalchemy.orm import Session, declarative_base

from media_index.models import Collection, MediaItem, SortDescriptor
from media_index.storage.library.schema import CURRENT_SCHEMA_VERSION, upgrade_record

logger = logging.getLogger(__name__)

# Create SQLAlchemy Base
Base = declarative_base()


class MediaItemDB(Base):
    """SQLAlchemy model for media item storage."""

    __tablename__ = "media_items"

    # Primary key (remote ID or local path)
    id = Column(String, primary_key=True)

    # Identity
    remote_id = Column(String, nullable=True, index=True)
    local_path = Column(String, nullable=True)

    # Sort columns
    title = Column(String, nullable=False)
    duration = Column(Float, nullable=False, default=0.0)
    added_at = Column(DateTime, nullable=False, default=datetime.now)
    last_watched_at = Column(DateTime, nullable=True)
    last_accessed_at = Column(DateTime, nullable=True)
    last_activity_at = Column(DateTime, nullable=True, index=True)

    # Full record (JSON serialized)
    schema_version = Column(Integer, nullable=False, default=int(CURRENT_SCHEMA_VERSION))
    data_json = Column(Text, nullable=False)

    def to_media_item(self) -> MediaItem:
        """Convert database model to MediaItem, upgrading older records."""
        record = json.loads(self.data_json)
        record = upgrade_record(record, self.schema_version)
        return MediaItem.model_validate(record)

    def apply(self, item: MediaItem) -> None:
        """Copy an item's state onto this row at the current schema version."""
        self.remote_id = item.remote_id
        self.local_path = item.local_path
        self.title = item.title
        self.duration = item.duration
        self.added_at = item.added_at
        self.last_watched_at = item.last_watched_at
        self.last_accessed_at = item.last_accessed_at
        self.last_activity_at = item.last_activity_at
        self.schema_version = int(CURRENT_SCHEMA_VERSION)
        self.data_json = item.model_dump_json()

    @staticmethod
    def from_media_item(item: MediaItem) -> "MediaItemDB":
        """Create database model from MediaItem."""
        row = MediaItemDB(id=item.identifier)
        row.apply(item)
        return row


class CollectionDB(Base):
    """SQLAlchemy model for collection storage."""

    __tablename__ = "collections"

    id = Column(String, primary_key=True)
    label = Column(String, nullable=False)
    item_count = Column(Integer, nullable=False, default=0, index=True)
    confidence_score = Column(Float, nullable=False, default=0.0)
    updated_at = Column(DateTime, nullable=False, default=datetime.now)

    # Centroid vector (JSON serialized)
    centroid_json = Column(Text, nullable=False, default="[]")

    def to_collection(self) -> Collection:
        """Convert database model to Collection."""
        return Collection(
            id=self.id,
            label=self.label,
            centroid=json.loads(self.centroid_json) if self.centroid_json else [],
            item_count=self.item_count,
            confidence_score=self.confidence_score,
            updated_at=self.updated_at,
        )

    @staticmethod
    def from_collection(collection: Collection) -> "CollectionDB":
        """Create database model from Collection."""
        return CollectionDB(
            id=collection.id,
            label=collection.label,
            item_count=collection.item_count,
            confidence_score=collection.confidence_score,
            updated_at=collection.updated_at or datetime.now(),
            centroid_json=json.dumps(collection.centroid),
        )


ITEM_SORT_COLUMNS: Dict[str, Column] = {
    "title": MediaItemDB.title,
    "duration": MediaItemDB.duration,
    "added_at": MediaItemDB.added_at,
    "last_watched_at": MediaItemDB.last_watched_at,
    "last_accessed_at": MediaItemDB.last_accessed_at,
    "last_activity_at": MediaItemDB.last_activity_at,
}

COLLECTION_SORT_COLUMNS: Dict[str, Column] = {
    "label": CollectionDB.label,
    "item_count": CollectionDB.item_count,
    "confidence_score": CollectionDB.confidence_score,
    "updated_at": CollectionDB.updated_at,
}


def _order_clauses(order_by: Sequence[SortDescriptor], columns: Dict[str, Column]) -> list:
    clauses = []
    for descriptor in order_by:
        column = columns.get(descriptor.field)
        if column is None:
            raise ValueError(f"Unsupported sort field: {descriptor.field}")

        ordered = column.desc() if descriptor.descending else column.asc()
        clauses.append(ordered.nulls_last())

    return clauses


class SQLAlchemyLibraryStore:
    """
    SQLAlchemy-based library storage.

    Works with any SQLAlchemy-compatible database including PostgreSQL,
    SQLite, MySQL, and more. Sorting happens in the database with None
    values last; insertion order is not guaranteed as a tie-break.

    Example:
        from sqlalchemy import create_engine
        engine = create_engine("sqlite:///media_index.db")
        store = SQLAlchemyLibraryStore(engine)
        store.create_tables()
    """

    def __init__(self, engine: Engine):
        """
        Initialize the SQLAlchemy library store.

        Args:
            engine: SQLAlchemy engine for database connection
        """
        self.engine = engine
        logger.info(f"SQLAlchemyLibraryStore initialized (engine={engine.url})")

    @contextmanager
    def _session(self):
        """Context manager for database sessions with automatic commit/rollback."""
        session = Session(self.engine)
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            session.close()

    def create_tables(self):
        """Create database tables if they don't exist."""
        Base.metadata.create_all(self.engine)
        logger.info("Database tables created/verified")

    # Items

    def add_item(self, item: MediaItem) -> str:
        """Store an item, replacing any existing row with the same identifier."""
        with self._session() as session:
            session.merge(MediaItemDB.from_media_item(item))

            logger.debug(f"Stored item {item.identifier}: '{item.title[:50]}'")
            return item.identifier

    def get_item(self, identifier: str) -> Optional[MediaItem]:
        with self._session() as session:
            row = session.get(MediaItemDB, identifier)
            if not row:
                return None

            return row.to_media_item()

    def update_item(self, item: MediaItem) -> bool:
        with self._session() as session:
            row = session.get(MediaItemDB, item.identifier)
            if not row:
                logger.warning(f"Cannot update item {item.identifier}: not found")
                return False

            row.apply(item)
            logger.debug(f"Updated item {item.identifier}")
            return True

    def delete_item(self, identifier: str) -> bool:
        with self._session() as session:
            count = session.query(MediaItemDB).filter(MediaItemDB.id == identifier).delete()
            if not count:
                logger.warning(f"Cannot delete item {identifier}: not found")
                return False

            logger.info(f"Deleted item {identifier}")
            return True

    def fetch_items(
        self,
        order_by: Sequence[SortDescriptor] = (),
        limit: Optional[int] = None,
    ) -> List[MediaItem]:
        with self._session() as session:
            query = session.query(MediaItemDB).order_by(
                *_order_clauses(order_by, ITEM_SORT_COLUMNS)
            )

            if limit is not None:
                query = query.limit(limit)

            return [row.to_media_item() for row in query.all()]

    def migrate(self) -> int:
        """
        Rewrite every record stored with an older schema version.

        Returns:
            Number of records upgraded
        """
        with self._session() as session:
            rows = (
                session.query(MediaItemDB)
                .filter(MediaItemDB.schema_version < int(CURRENT_SCHEMA_VERSION))
                .all()
            )
            for row in rows:
                row.apply(row.to_media_item())

            logger.info(f"Upgraded {len(rows)} items to schema {CURRENT_SCHEMA_VERSION.name}")
            return len(rows)

    # Collections

    def add_collection(self, collection: Collection) -> str:
        with self._session() as session:
            session.merge(CollectionDB.from_collection(collection))

            logger.debug(f"Stored collection {collection.id}: '{collection.label}'")
            return collection.id

    def get_collection(self, collection_id: str) -> Optional[Collection]:
        with self._session() as session:
            row = session.get(CollectionDB, collection_id)
            if not row:
                return None

            return row.to_collection()

    def delete_collection(self, collection_id: str) -> bool:
        with self._session() as session:
            count = session.query(CollectionDB).filter(CollectionDB.id == collection_id).delete()
            if not count:
                logger.warning(f"Cannot delete collection {collection_id}: not found")
                return False

            logger.info(f"Deleted collection {collection_id}")
            return True

    def fetch_collections(
        self,
        order_by: Sequence[SortDescriptor] = (),
        limit: Optional[int] = None,
    ) -> List[Collection]:
        with self._session() as session:
            query = session.query(CollectionDB).order_by(
                *_order_clauses(order_by, COLLECTION_SORT_COLUMNS)
            )

            if limit is not None:
                query = query.limit(limit)

            return [row.to_collection() for row in query.all()]
