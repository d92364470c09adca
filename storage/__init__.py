# storage/__init__.py
"""
storage package

Provides:
- AnalysisStore interface and StorageError
- MemoryStore (process-local) and SqliteStore (file-backed) backends
- build_storage(): pick the backend once, from configuration
"""
import logging

from utils.config import Config

from .base import AnalysisStore, StorageError
from .memory_store import MemoryStore
from .sqlite_store import SqliteStore

logger = logging.getLogger("storage")


def build_storage(backend=None, path=None):
    backend = (backend or Config.STORAGE_BACKEND).lower()
    if backend == "memory":
        logger.info("Using in-memory storage")
        return MemoryStore()
    if backend == "sqlite":
        return SqliteStore(path or Config.SQLITE_PATH)
    raise ValueError(f"Unknown storage backend: {backend}")


__all__ = [
    "AnalysisStore",
    "StorageError",
    "MemoryStore",
    "SqliteStore",
    "build_storage",
]
