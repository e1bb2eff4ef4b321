# app/shared/storage/__init__.py
"""
Persistence gateway

- base.py: Storage contract and rating aggregation rule
- database_storage.py: SQLAlchemy implementation (durable)
- memory_storage.py: in-process implementation
"""

from app.config.settings import Settings
from .base import Storage, aggregate_rating, DELIVERY_FILTER_FIELDS
from .database_storage import DatabaseStorage
from .memory_storage import MemoryStorage


def build_storage(settings: Settings) -> Storage:
    """Pick the storage backend named in settings"""
    backend = settings.storage_backend.lower()
    if backend == "memory":
        return MemoryStorage()
    if backend == "database":
        return DatabaseStorage(settings)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


__all__ = [
    "Storage",
    "DatabaseStorage",
    "MemoryStorage",
    "build_storage",
    "aggregate_rating",
    "DELIVERY_FILTER_FIELDS"
]
