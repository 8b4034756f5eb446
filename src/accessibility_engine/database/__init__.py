"""Local cache storage for the Accessibility Engine."""

from .models import (
    Base,
    CacheEntry,
    create_db_engine,
    create_session_factory,
    init_db,
)
from .local_cache import SQLiteLocalCache
