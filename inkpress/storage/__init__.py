"""
Storage abstractions.

- DocumentStore → any document database (in-memory for development)
"""

from inkpress.storage.base import (
    ASCENDING,
    DESCENDING,
    Collections,
    DocumentStore,
    DuplicateKeyError,
    StorageError,
    StoreQuery,
    TextMatch,
)
from inkpress.storage.local import InMemoryDocumentStore, create_local_storage

__all__ = [
    "ASCENDING",
    "DESCENDING",
    "Collections",
    "DocumentStore",
    "DuplicateKeyError",
    "InMemoryDocumentStore",
    "StorageError",
    "StoreQuery",
    "TextMatch",
    "create_local_storage",
]
