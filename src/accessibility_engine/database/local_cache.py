"""
Device-local key-value cache backed by SQLite.

Reads and writes are synchronous and short. A failing database never breaks
the caller: read errors fall back to the default and write errors are logged.
"""

import threading
from pathlib import Path
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import CacheEntry, create_db_engine, create_session_factory, init_db
from ..utils.logger import get_logger, log_exception

logger = get_logger(__name__)


class SQLiteLocalCache:
    """Key-value cache with one short session per operation."""

    def __init__(self, database_path: Optional[Path] = None):
        """
        Open (and create if needed) the cache database.

        Args:
            database_path: Optional custom database path
        """
        self._engine = create_db_engine(database_path)
        init_db(self._engine)
        self._session_factory = create_session_factory(self._engine)
        self._lock = threading.Lock()

    def _session(self) -> Session:
        return self._session_factory()

    @staticmethod
    def _find(session: Session, key: str) -> Optional[CacheEntry]:
        return session.scalars(
            select(CacheEntry).where(CacheEntry.key == key)
        ).first()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a cached value."""
        try:
            with self._lock, self._session() as session:
                entry = self._find(session, key)
                return entry.value if entry else default
        except SQLAlchemyError as e:
            log_exception(logger, e, f"Failed to read cache entry {key}")
            return default

    def set(self, key: str, value: str) -> None:
        """Insert or update a cached value."""
        try:
            with self._lock, self._session() as session:
                entry = self._find(session, key)
                if entry:
                    entry.value = value
                else:
                    session.add(CacheEntry(key=key, value=value))
                session.commit()
        except SQLAlchemyError as e:
            log_exception(logger, e, f"Failed to write cache entry {key}")

    def delete(self, key: str) -> bool:
        """Delete a cached value; returns True if it existed."""
        try:
            with self._lock, self._session() as session:
                entry = self._find(session, key)
                if entry is None:
                    return False
                session.delete(entry)
                session.commit()
        except SQLAlchemyError as e:
            log_exception(logger, e, f"Failed to delete cache entry {key}")
            return False

        logger.info(f"Deleted cache entry: {key}")
        return True

    def get_all(self) -> Dict[str, str]:
        """Get every cached entry (empty if the database cannot be read)."""
        try:
            with self._lock, self._session() as session:
                return {entry.key: entry.value for entry in session.scalars(select(CacheEntry))}
        except SQLAlchemyError as e:
            log_exception(logger, e, "Failed to read cache entries")
            return {}

    def close(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()
