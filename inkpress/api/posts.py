# =============================================================================
# Post API Routes
# =============================================================================
#
# Endpoints:
#   GET    /api/posts               - List (optional auth, visibility scoped)
#   GET    /api/posts/{id}          - Single post, records a view
#   POST   /api/posts               - Create
#   PUT    /api/posts/{id}          - Update (author or admin)
#   DELETE /api/posts/{id}          - Delete (author or admin)
#   POST   /api/posts/{id}/like     - Toggle like
#   POST   /api/posts/{id}/comments - Add comment
#
# =============================================================================

from typing import Any

from fastapi import APIRouter, Body, Depends

from inkpress.api.deps import get_lifecycle, get_query_builder, get_store
from inkpress.api.responses import ok
from inkpress.auth.context import AuthContext
from inkpress.auth.policies import optional_auth, require_auth
from inkpress.core.models import CommentCreate, PostCreate
from inkpress.services import PostFilters, PostLifecycle, PostQueryBuilder, run_query
from inkpress.services.shaping import shape_comment_list, shape_detail
from inkpress.storage import DocumentStore

router = APIRouter(prefix="/api/posts", tags=["posts"])


# =============================================================================
# Reads
# =============================================================================

@router.get("")
async def list_posts(
    page: str | None = None,
    limit: str | None = None,
    search: str | None = None,
    category: str | None = None,
    author: str | None = None,
    status: str | None = None,
    sort: str | None = None,
    ctx: AuthContext = Depends(optional_auth()),
    builder: PostQueryBuilder = Depends(get_query_builder),
    store: DocumentStore = Depends(get_store),
):
    """
    List posts the caller may see.

    Anonymous and regular users only ever get published posts; admins may
    pass ?status=draft|archived.
    """
    query = builder.build(
        ctx,
        PostFilters(search=search, category=category, author=author, status=status),
        sort=sort,
        page=page,
        page_size=limit,
    )
    result = await run_query(store, query)
    return ok(
        result.items,
        pagination={
            "page": result.page,
            "limit": result.page_size,
            "total": result.total,
            "total_pages": result.total_pages,
            "has_next": result.has_next,
            "has_prev": result.has_prev,
        },
    )


@router.get("/{post_id}")
async def get_post(
    post_id: str,
    ctx: AuthContext = Depends(optional_auth()),
    lifecycle: PostLifecycle = Depends(get_lifecycle),
    store: DocumentStore = Depends(get_store),
):
    """Get a single post. Drafts are visible to their author and admins."""
    post = await lifecycle.get(ctx, post_id)
    return ok(await shape_detail(store, post))


# =============================================================================
# Mutations
# =============================================================================

@router.post("", status_code=201)
async def create_post(
    data: PostCreate,
    ctx: AuthContext = Depends(require_auth()),
    lifecycle: PostLifecycle = Depends(get_lifecycle),
    store: DocumentStore = Depends(get_store),
):
    """Create a post owned by the caller."""
    post = await lifecycle.create(ctx, data)
    return ok(await shape_detail(store, post), message="Post created successfully", status_code=201)


@router.put("/{post_id}")
async def update_post(
    post_id: str,
    payload: Any = Body(default=None),
    ctx: AuthContext = Depends(require_auth()),
    lifecycle: PostLifecycle = Depends(get_lifecycle),
    store: DocumentStore = Depends(get_store),
):
    """
    Update a post.

    The body is validated after the ownership check, so only the author
    or an admin ever sees validation errors.
    """
    post = await lifecycle.update(ctx, post_id, payload if payload is not None else {})
    return ok(await shape_detail(store, post), message="Post updated successfully")


@router.delete("/{post_id}")
async def delete_post(
    post_id: str,
    ctx: AuthContext = Depends(require_auth()),
    lifecycle: PostLifecycle = Depends(get_lifecycle),
):
    """Delete a post."""
    await lifecycle.delete(ctx, post_id)
    return ok(message="Post deleted successfully")


@router.post("/{post_id}/like")
async def toggle_like(
    post_id: str,
    ctx: AuthContext = Depends(require_auth()),
    lifecycle: PostLifecycle = Depends(get_lifecycle),
):
    """Like the post, or unlike it if the caller already does."""
    post = await lifecycle.toggle_like(ctx, post_id)
    return ok(
        {
            "liked_by": post.liked_by,
            "like_count": post.like_count,
            "liked": ctx.user_id in post.liked_by,
        },
        message="Like toggled successfully",
    )


@router.post("/{post_id}/comments")
async def add_comment(
    post_id: str,
    data: CommentCreate,
    ctx: AuthContext = Depends(require_auth()),
    lifecycle: PostLifecycle = Depends(get_lifecycle),
    store: DocumentStore = Depends(get_store),
):
    """Append a comment."""
    post = await lifecycle.add_comment(ctx, post_id, data)
    return ok(
        {
            "comments": await shape_comment_list(store, post),
            "comment_count": post.comment_count,
        },
        message="Comment added successfully",
    )
