"""
Response shaping for posts.

Resolves the foreign fields a response needs (author username, category
name/color, comment authors) with one batched store lookup per collection,
then renders summaries and details. Counts are computed here from the
stored collections, never stored redundantly.
"""

from __future__ import annotations

from typing import Any, Iterable

from inkpress.core.models import Post
from inkpress.storage import Collections, DocumentStore, StoreQuery


async def _lookup(
    store: DocumentStore, collection: str, ids: Iterable[str | None], fields: tuple[str, ...]
) -> dict[str, dict[str, Any]]:
    wanted = frozenset(i for i in ids if i)
    if not wanted:
        return {}
    docs = await store.find(collection, StoreQuery(any_of={"id": wanted}))
    return {doc["id"]: {f: doc.get(f) for f in ("id", *fields)} for doc in docs}


async def _authors(store: DocumentStore, ids: Iterable[str | None]) -> dict[str, dict[str, Any]]:
    return await _lookup(store, Collections.USERS, ids, ("username",))


async def _categories(store: DocumentStore, ids: Iterable[str | None]) -> dict[str, dict[str, Any]]:
    return await _lookup(store, Collections.CATEGORIES, ids, ("name", "color"))


def _summary(post: Post, authors: dict, categories: dict) -> dict[str, Any]:
    return {
        "id": post.id,
        "title": post.title,
        "slug": post.slug,
        "excerpt": post.excerpt,
        "author": authors.get(post.author_id),
        "category": categories.get(post.category_id) if post.category_id else None,
        "tags": list(post.tags),
        "status": post.status.value,
        "views": post.views,
        "like_count": post.like_count,
        "comment_count": post.comment_count,
        "reading_time": post.reading_time,
        "created_at": post.created_at,
        "updated_at": post.updated_at,
    }


async def shape_summaries(store: DocumentStore, posts: list[Post]) -> list[dict[str, Any]]:
    """List-view rendering of several posts."""
    authors = await _authors(store, (p.author_id for p in posts))
    categories = await _categories(store, (p.category_id for p in posts))
    return [_summary(p, authors, categories) for p in posts]


async def shape_detail(store: DocumentStore, post: Post) -> dict[str, Any]:
    """Full rendering of one post, comments included."""
    user_ids = [post.author_id, *(c.author_id for c in post.comments)]
    authors = await _authors(store, user_ids)
    categories = await _categories(store, [post.category_id])

    detail = _summary(post, authors, categories)
    detail["content"] = post.content
    detail["liked_by"] = list(post.liked_by)
    detail["comments"] = shape_comments(post, authors)
    return detail


def shape_comments(post: Post, authors: dict) -> list[dict[str, Any]]:
    return [
        {
            "author": authors.get(c.author_id, {"id": c.author_id, "username": None}),
            "content": c.content,
            "created_at": c.created_at,
        }
        for c in post.comments
    ]


async def shape_comment_list(store: DocumentStore, post: Post) -> list[dict[str, Any]]:
    authors = await _authors(store, (c.author_id for c in post.comments))
    return shape_comments(post, authors)
