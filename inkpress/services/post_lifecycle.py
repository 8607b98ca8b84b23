"""
Post lifecycle - every mutation of a post.

Each operation checks its ownership/role precondition against the caller's
AuthContext, maintains derived fields (slug, excerpt), and then persists
with the narrowest store operation that does the job:

- update sets only the changed fields, so it never overwrites likes or
  comments written concurrently
- likes, comments and views use the store's atomic single-document
  operations (toggle_member / append / increment), never get-modify-save
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from inkpress.auth.context import AuthContext
from inkpress.core.errors import Conflict, NotFound, ValidationError
from inkpress.core.models import (
    Comment,
    CommentCreate,
    Post,
    PostCreate,
    PostStatus,
    PostUpdate,
    Role,
    make_excerpt,
    make_slug,
    normalize_tags,
)
from inkpress.core.utils import short_suffix, utc_now
from inkpress.services.visibility import can_view_detail
from inkpress.storage import Collections, DocumentStore, DuplicateKeyError

logger = logging.getLogger(__name__)

SLUG_ATTEMPTS = 3


def validate_input(model: type[BaseModel], payload: Any) -> Any:
    """Validate a raw payload, reporting failures as a domain ValidationError."""
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e)


class PostLifecycle:
    """
    Create, update, delete, like, comment on, and view posts.

    Usage:
        lifecycle = PostLifecycle(store)
        post = await lifecycle.create(ctx, PostCreate(title=..., content=...))
    """

    def __init__(self, store: DocumentStore, excerpt_length: int = 150):
        self.store = store
        self.excerpt_length = excerpt_length

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def _load(self, post_id: str) -> Post:
        doc = await self.store.get(Collections.POSTS, post_id)
        if doc is None:
            raise NotFound("Post not found")
        return Post.model_validate(doc)

    async def _load_visible(self, ctx: AuthContext, post_id: str) -> Post:
        post = await self._load(post_id)
        if not can_view_detail(ctx, post):
            raise NotFound("Post not found")
        return post

    async def _unique_slug(self, title: str, exclude_id: str | None = None) -> str:
        base = make_slug(title)
        slug = base
        while True:
            existing = await self.store.find_one(Collections.POSTS, {"slug": slug})
            if existing is None or existing["id"] == exclude_id:
                return slug
            slug = f"{base}-{short_suffix()}"

    async def _check_category(self, category_id: str | None) -> None:
        if category_id is None:
            return
        if await self.store.get(Collections.CATEGORIES, category_id) is None:
            raise ValidationError.for_field("category", "Invalid category ID")

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get(self, ctx: AuthContext, post_id: str) -> Post:
        """
        Single-item fetch. Authors and admins see any status; everyone
        else only published posts. Every successful fetch counts a view.
        """
        await self._load_visible(ctx, post_id)
        return await self.record_view(post_id)

    async def record_view(self, post_id: str) -> Post:
        """Increment views unconditionally. No per-caller deduplication."""
        doc = await self.store.increment(Collections.POSTS, post_id, "views")
        if doc is None:
            raise NotFound("Post not found")
        return Post.model_validate(doc)

    # -------------------------------------------------------------------------
    # Create / update / delete
    # -------------------------------------------------------------------------

    async def create(self, ctx: AuthContext, payload: PostCreate | dict[str, Any]) -> Post:
        identity = ctx.require_identity()
        data: PostCreate = validate_input(PostCreate, payload)
        await self._check_category(data.category)

        # Only admins choose a status; anyone else silently gets published.
        status = PostStatus.PUBLISHED
        if identity.role == Role.ADMIN and data.status is not None:
            status = data.status

        for _ in range(SLUG_ATTEMPTS):
            post = Post(
                title=data.title,
                content=data.content,
                slug=await self._unique_slug(data.title),
                excerpt=data.excerpt or make_excerpt(data.content, self.excerpt_length),
                author_id=identity.id,
                category_id=data.category,
                tags=normalize_tags(data.tags),
                status=status,
            )
            try:
                await self.store.insert(Collections.POSTS, post.id, post.model_dump())
            except DuplicateKeyError as e:
                if e.field != "slug":
                    raise Conflict(e.field)
                continue
            logger.info(f"Post {post.id} ({post.slug}) created by {identity.id}")
            return post

        raise Conflict("slug", "Slug already exists")

    async def update(self, ctx: AuthContext, post_id: str, payload: PostUpdate | dict[str, Any]) -> Post:
        """
        Partial update by the author or an admin.

        The ownership gate runs before input validation, so a stranger gets
        Forbidden even for a malformed body. Status changes from non-admins
        are ignored; the slug only changes when the title does.
        """
        post = await self._load(post_id)
        identity = ctx.require_owner_or_role(post.author_id, Role.ADMIN)
        data: PostUpdate = validate_input(PostUpdate, payload)
        provided = data.model_fields_set

        changes: dict[str, Any] = {}
        if data.title is not None and data.title != post.title:
            changes["title"] = data.title
            changes["slug"] = await self._unique_slug(data.title, exclude_id=post.id)
        if data.content is not None and data.content != post.content:
            changes["content"] = data.content
            if "excerpt" not in provided:
                changes["excerpt"] = make_excerpt(data.content, self.excerpt_length)
        if "excerpt" in provided:
            changes["excerpt"] = data.excerpt or make_excerpt(
                changes.get("content", post.content), self.excerpt_length
            )
        if "category" in provided:
            await self._check_category(data.category)
            changes["category_id"] = data.category
        if data.tags is not None:
            changes["tags"] = normalize_tags(data.tags)
        if data.status is not None and identity.role == Role.ADMIN:
            changes["status"] = data.status
        changes["updated_at"] = utc_now()

        try:
            doc = await self.store.update(Collections.POSTS, post_id, changes)
        except DuplicateKeyError as e:
            raise Conflict(e.field, f"{e.field.capitalize()} already exists")
        if doc is None:
            raise NotFound("Post not found")
        return Post.model_validate(doc)

    async def delete(self, ctx: AuthContext, post_id: str) -> None:
        """Immediate, unconditional removal by the author or an admin."""
        post = await self._load(post_id)
        identity = ctx.require_owner_or_role(post.author_id, Role.ADMIN)
        if not await self.store.delete(Collections.POSTS, post_id):
            raise NotFound("Post not found")
        logger.info(f"Post {post_id} deleted by {identity.id}")

    # -------------------------------------------------------------------------
    # Likes and comments
    # -------------------------------------------------------------------------

    async def toggle_like(self, ctx: AuthContext, post_id: str) -> Post:
        """Add the caller to liked_by, or remove them if already there."""
        identity = ctx.require_identity()
        await self._load_visible(ctx, post_id)
        doc = await self.store.toggle_member(Collections.POSTS, post_id, "liked_by", identity.id)
        if doc is None:
            raise NotFound("Post not found")
        return Post.model_validate(doc)

    async def add_comment(self, ctx: AuthContext, post_id: str, payload: CommentCreate | dict[str, Any]) -> Post:
        """Append one comment with a server-assigned timestamp."""
        identity = ctx.require_identity()
        data: CommentCreate = validate_input(CommentCreate, payload)
        await self._load_visible(ctx, post_id)

        comment = Comment(author_id=identity.id, content=data.content)
        doc = await self.store.append(Collections.POSTS, post_id, "comments", comment.model_dump())
        if doc is None:
            raise NotFound("Post not found")
        return Post.model_validate(doc)
