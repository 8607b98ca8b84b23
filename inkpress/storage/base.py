"""
Storage abstraction layer.

All persistence goes through this interface, so the in-memory backend can
be swapped for a real document database without touching the services.

The store is the only synchronization point between concurrent requests.
Each method is one store operation and is atomic for the single document
it touches. Services must use `toggle_member`, `append` and `increment`
for concurrent-safe mutations instead of get-modify-save.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


ASCENDING = 1
DESCENDING = -1


class StorageError(Exception):
    """Base exception for storage failures."""
    pass


class DuplicateKeyError(StorageError):
    """A unique index rejected the write."""

    def __init__(self, collection: str, field: str, value: Any):
        self.collection = collection
        self.field = field
        self.value = value
        super().__init__(f"Duplicate {collection}.{field}: {value!r}")


# =============================================================================
# Queries
# =============================================================================


@dataclass(frozen=True)
class TextMatch:
    """Case-insensitive substring match over several fields (logical OR)."""

    fields: tuple[str, ...]
    text: str

    @property
    def pattern(self) -> re.Pattern:
        # User text is always escaped; it is never interpreted as a regex.
        return re.compile(re.escape(self.text), re.IGNORECASE)

    def matches(self, doc: dict[str, Any]) -> bool:
        pattern = self.pattern
        return any(
            isinstance(doc.get(f), str) and pattern.search(doc[f]) is not None
            for f in self.fields
        )


@dataclass(frozen=True)
class StoreQuery:
    """
    A bounded, deterministic query against one collection.

    equals:  field == value
    any_of:  field in values
    text:    optional escaped text match
    sort:    (field, ASCENDING | DESCENDING) pairs, first is primary
    """

    equals: dict[str, Any] = field(default_factory=dict)
    any_of: dict[str, frozenset] = field(default_factory=dict)
    text: TextMatch | None = None
    sort: tuple[tuple[str, int], ...] = ()
    skip: int = 0
    limit: int | None = None

    def matches(self, doc: dict[str, Any]) -> bool:
        for key, value in self.equals.items():
            if doc.get(key) != value:
                return False
        for key, values in self.any_of.items():
            if doc.get(key) not in values:
                return False
        if self.text is not None and not self.text.matches(doc):
            return False
        return True


# =============================================================================
# Storage Interface
# =============================================================================


class DocumentStore(ABC):
    """
    Storage for structured documents (users, posts, categories).

    Local Implementation: in-memory
    """

    @abstractmethod
    async def insert(self, collection: str, id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a new document. Raises DuplicateKeyError on unique violations."""
        pass

    @abstractmethod
    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        """Get a document by ID."""
        pass

    @abstractmethod
    async def find_one(self, collection: str, filters: dict[str, Any]) -> dict[str, Any] | None:
        """First document whose fields equal all of `filters`."""
        pass

    @abstractmethod
    async def find(self, collection: str, query: StoreQuery) -> list[dict[str, Any]]:
        """Documents matching the query, sorted and paginated."""
        pass

    @abstractmethod
    async def count(self, collection: str, query: StoreQuery) -> int:
        """Number of matching documents, ignoring skip/limit."""
        pass

    @abstractmethod
    async def update(self, collection: str, id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        """Set the given fields. Returns the updated document, None if absent."""
        pass

    @abstractmethod
    async def delete(self, collection: str, id: str) -> bool:
        """Delete a document."""
        pass

    @abstractmethod
    async def delete_many(self, collection: str, filters: dict[str, Any]) -> int:
        """Delete every document matching `filters`, return how many."""
        pass

    # -------------------------------------------------------------------------
    # Atomic single-document operations
    # -------------------------------------------------------------------------

    @abstractmethod
    async def toggle_member(
        self, collection: str, id: str, field: str, value: Any
    ) -> dict[str, Any] | None:
        """Remove `value` from the list field if present, else add it."""
        pass

    @abstractmethod
    async def append(
        self, collection: str, id: str, field: str, value: Any
    ) -> dict[str, Any] | None:
        """Append `value` to the list field."""
        pass

    @abstractmethod
    async def increment(
        self, collection: str, id: str, field: str, amount: int = 1
    ) -> dict[str, Any] | None:
        """Add `amount` to a numeric field."""
        pass


# =============================================================================
# Collection Names
# =============================================================================


class Collections:
    """Standard collection names."""

    USERS = "users"
    POSTS = "posts"
    CATEGORIES = "categories"


UNIQUE_FIELDS: dict[str, tuple[str, ...]] = {
    Collections.USERS: ("email", "username"),
    Collections.POSTS: ("slug",),
}
