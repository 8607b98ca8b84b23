"""
Local storage implementation for development and tests.

Everything lives in process memory. A single asyncio.Lock serializes
operations, which makes each call atomic with respect to the others.
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any

from inkpress.core.utils import utc_now
from inkpress.storage.base import (
    UNIQUE_FIELDS,
    DocumentStore,
    DuplicateKeyError,
    StoreQuery,
)


class InMemoryDocumentStore(DocumentStore):
    """In-memory document storage."""

    def __init__(self, unique_fields: dict[str, tuple[str, ...]] | None = None):
        self._data: dict[str, dict[str, dict[str, Any]]] = {}
        self._unique = unique_fields if unique_fields is not None else UNIQUE_FIELDS
        self._lock = asyncio.Lock()

    def _collection(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._data.setdefault(collection, {})

    def _check_unique(self, collection: str, id: str, data: dict[str, Any]) -> None:
        for field in self._unique.get(collection, ()):
            value = data.get(field)
            if value is None:
                continue
            for other_id, other in self._collection(collection).items():
                if other_id != id and other.get(field) == value:
                    raise DuplicateKeyError(collection, field, value)

    # Callers get copies so nothing outside the lock can mutate stored state.

    async def insert(self, collection: str, id: str, data: dict[str, Any]) -> dict[str, Any]:
        async with self._lock:
            docs = self._collection(collection)
            if id in docs:
                raise DuplicateKeyError(collection, "id", id)
            self._check_unique(collection, id, data)
            docs[id] = copy.deepcopy({**data, "id": id})
            return copy.deepcopy(docs[id])

    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        async with self._lock:
            doc = self._collection(collection).get(id)
            return copy.deepcopy(doc) if doc is not None else None

    async def find_one(self, collection: str, filters: dict[str, Any]) -> dict[str, Any] | None:
        query = StoreQuery(equals=filters)
        async with self._lock:
            for doc in self._collection(collection).values():
                if query.matches(doc):
                    return copy.deepcopy(doc)
        return None

    async def find(self, collection: str, query: StoreQuery) -> list[dict[str, Any]]:
        async with self._lock:
            results = [d for d in self._collection(collection).values() if query.matches(d)]

            # Stable sorts applied from the least significant key up.
            for key, direction in reversed(query.sort):
                results.sort(key=lambda d: _sort_key(d.get(key)), reverse=direction < 0)

            end = None if query.limit is None else query.skip + query.limit
            return copy.deepcopy(results[query.skip:end])

    async def count(self, collection: str, query: StoreQuery) -> int:
        async with self._lock:
            return sum(1 for d in self._collection(collection).values() if query.matches(d))

    async def update(self, collection: str, id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        async with self._lock:
            doc = self._collection(collection).get(id)
            if doc is None:
                return None
            self._check_unique(collection, id, {**doc, **changes})
            doc.update(copy.deepcopy(changes))
            return copy.deepcopy(doc)

    async def delete(self, collection: str, id: str) -> bool:
        async with self._lock:
            return self._collection(collection).pop(id, None) is not None

    async def delete_many(self, collection: str, filters: dict[str, Any]) -> int:
        query = StoreQuery(equals=filters)
        async with self._lock:
            docs = self._collection(collection)
            doomed = [doc_id for doc_id, doc in docs.items() if query.matches(doc)]
            for doc_id in doomed:
                del docs[doc_id]
            return len(doomed)

    async def toggle_member(
        self, collection: str, id: str, field: str, value: Any
    ) -> dict[str, Any] | None:
        async with self._lock:
            doc = self._collection(collection).get(id)
            if doc is None:
                return None
            members = doc.setdefault(field, [])
            if value in members:
                members.remove(value)
            else:
                members.append(value)
            doc["updated_at"] = utc_now()
            return copy.deepcopy(doc)

    async def append(
        self, collection: str, id: str, field: str, value: Any
    ) -> dict[str, Any] | None:
        async with self._lock:
            doc = self._collection(collection).get(id)
            if doc is None:
                return None
            doc.setdefault(field, []).append(copy.deepcopy(value))
            doc["updated_at"] = utc_now()
            return copy.deepcopy(doc)

    async def increment(
        self, collection: str, id: str, field: str, amount: int = 1
    ) -> dict[str, Any] | None:
        async with self._lock:
            doc = self._collection(collection).get(id)
            if doc is None:
                return None
            doc[field] = doc.get(field, 0) + amount
            return copy.deepcopy(doc)


def _sort_key(value: Any) -> tuple:
    # None sorts before everything; strings compare case-insensitively.
    if value is None:
        return (0, "")
    if isinstance(value, str):
        return (1, value.lower())
    return (1, value)


def create_local_storage() -> InMemoryDocumentStore:
    """Create an empty in-memory store with the standard unique indexes."""
    return InMemoryDocumentStore()
