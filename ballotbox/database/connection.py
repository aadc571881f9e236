import logging
from typing import Optional

from ..config import STORAGE_BACKEND
from ..storage import ElectionStore, MemoryElectionStore

logger = logging.getLogger(__name__)

_store: Optional[ElectionStore] = None


def create_store(backend: str = STORAGE_BACKEND) -> ElectionStore:
    if backend == "memory":
        logger.info("Using in-memory election store")
        return MemoryElectionStore()
    if backend == "mongo":
        from ..storage_mongo import MongoElectionStore
        return MongoElectionStore()
    raise ValueError(f"Unknown storage backend {backend!r}. Use 'memory' or 'mongo'.")


def get_store() -> ElectionStore:
    """FastAPI dependency returning the process-wide store handle."""
    global _store
    if _store is None:
        _store = create_store()
    return _store


def close_store() -> None:
    global _store
    if _store is not None:
        _store.close()
        _store = None
