"""
Post list queries.

Turns the list endpoint's raw parameters plus the caller's visibility
scope into a bounded, deterministic StoreQuery, then runs it.

Guarantees:
- the status filter is clamped through the visibility policy
- search text is matched literally (escaped), case-insensitively, over
  title OR content
- 1 <= page_size <= max_page_size, page >= 1
- unknown sort values fall back to newest
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel

from inkpress.auth.context import AuthContext
from inkpress.core.models import Post, PostStatus
from inkpress.services.shaping import shape_summaries
from inkpress.services.visibility import scope_for
from inkpress.storage import ASCENDING, DESCENDING, Collections, DocumentStore, StoreQuery, TextMatch

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class SortOrder(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    POPULAR = "popular"
    TITLE = "title"

    @classmethod
    def parse(cls, value: str | None) -> SortOrder:
        """Fails closed to NEWEST for anything unrecognized."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.NEWEST


# Every ordering ends on "id" so equal keys still sort the same way each time.
SORT_KEYS: dict[SortOrder, tuple[tuple[str, int], ...]] = {
    SortOrder.NEWEST: (("created_at", DESCENDING), ("id", DESCENDING)),
    SortOrder.OLDEST: (("created_at", ASCENDING), ("id", ASCENDING)),
    SortOrder.POPULAR: (("views", DESCENDING), ("created_at", DESCENDING), ("id", DESCENDING)),
    SortOrder.TITLE: (("title", ASCENDING), ("id", ASCENDING)),
}

SEARCH_FIELDS = ("title", "content")


class PostFilters(BaseModel):
    """Raw list filters as they arrive from the query string."""

    search: str | None = None
    category: str | None = None
    author: str | None = None
    status: str | None = None


@dataclass(frozen=True)
class PostQuery:
    """A built query plus the pagination it was built with."""

    store_query: StoreQuery
    page: int
    page_size: int
    statuses: frozenset[PostStatus]
    sort: SortOrder


class PostPage(BaseModel):
    items: list[dict[str, Any]]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_prev: bool


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_status(value: str | None) -> PostStatus | None:
    """Unknown status strings are treated as no status filter."""
    if not value:
        return None
    try:
        return PostStatus(value.strip().lower())
    except ValueError:
        return None


class PostQueryBuilder:
    """Builds list queries. Stateless apart from its page size bounds."""

    def __init__(self, default_page_size: int = DEFAULT_PAGE_SIZE, max_page_size: int = MAX_PAGE_SIZE):
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    def clamp_page(self, page: Any) -> int:
        return max(1, _to_int(page, 1))

    def clamp_page_size(self, page_size: Any) -> int:
        size = _to_int(page_size, self.default_page_size)
        return min(max(1, size), self.max_page_size)

    def build(
        self,
        ctx: AuthContext,
        filters: PostFilters | None = None,
        sort: str | None = None,
        page: Any = None,
        page_size: Any = None,
    ) -> PostQuery:
        filters = filters or PostFilters()
        page = self.clamp_page(page)
        page_size = self.clamp_page_size(page_size)
        order = SortOrder.parse(sort)
        statuses = scope_for(ctx, parse_status(filters.status))

        equals: dict[str, Any] = {}
        if filters.category:
            equals["category_id"] = filters.category
        if filters.author:
            equals["author_id"] = filters.author

        text = None
        if filters.search and filters.search.strip():
            text = TextMatch(fields=SEARCH_FIELDS, text=filters.search.strip())

        store_query = StoreQuery(
            equals=equals,
            any_of={"status": statuses},
            text=text,
            sort=SORT_KEYS[order],
            skip=(page - 1) * page_size,
            limit=page_size,
        )
        return PostQuery(
            store_query=store_query,
            page=page,
            page_size=page_size,
            statuses=statuses,
            sort=order,
        )


async def run_query(store: DocumentStore, query: PostQuery) -> PostPage:
    """Execute a built query and shape the page."""
    docs = await store.find(Collections.POSTS, query.store_query)
    total = await store.count(Collections.POSTS, query.store_query)

    posts = [Post.model_validate(d) for d in docs]
    total_pages = math.ceil(total / query.page_size)

    return PostPage(
        items=await shape_summaries(store, posts),
        total=total,
        page=query.page,
        page_size=query.page_size,
        total_pages=total_pages,
        has_next=query.page < total_pages,
        has_prev=query.page > 1,
    )
