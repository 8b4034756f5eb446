"""
SQLAlchemy models for the local preference cache.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, DateTime, Integer, String, Text, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.engine import Engine

from ..utils import constants


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class CacheEntry(Base):
    """One key-value entry of the device-local cache."""

    __tablename__ = "cache_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    key: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_cache_entries_key", "key", unique=True),
    )

    def __repr__(self) -> str:
        return f"<CacheEntry(key='{self.key}')>"


def create_db_engine(database_path: Optional[Path] = None) -> Engine:
    """
    Create an engine for the cache database.

    Args:
        database_path: Optional custom database path

    Returns:
        SQLAlchemy Engine instance
    """
    if database_path is None:
        constants.ensure_directories()
        database_path = constants.DATABASE_FILE
    else:
        Path(database_path).parent.mkdir(parents=True, exist_ok=True)

    return create_engine(
        f"sqlite:///{database_path}",
        echo=False,
        future=True,
    )


def init_db(engine: Engine) -> None:
    """Create all tables on the given engine."""
    Base.metadata.create_all(engine)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to ``engine``."""
    return sessionmaker(bind=engine, expire_on_commit=False)
