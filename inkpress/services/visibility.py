"""
Visibility policy - which post statuses a caller may see.

List views and single-item fetches deliberately differ:

- Lists: the status gate applies to everyone, authors included. Only
  admins may ask for draft/archived, and only one status at a time.
- Single item: a post's own author (and any admin) may fetch it whatever
  its status.

Hidden posts are reported as NotFound, never Forbidden.
"""

from __future__ import annotations

from inkpress.auth.context import AuthContext
from inkpress.core.models import Post, PostStatus

PUBLIC_STATUSES: frozenset[PostStatus] = frozenset({PostStatus.PUBLISHED})
ALL_STATUSES: frozenset[PostStatus] = frozenset(PostStatus)


def allowed_statuses(ctx: AuthContext) -> frozenset[PostStatus]:
    """Every status the caller could ever list."""
    return ALL_STATUSES if ctx.is_admin else PUBLIC_STATUSES


def scope_for(ctx: AuthContext, requested: PostStatus | None = None) -> frozenset[PostStatus]:
    """
    Statuses a list query for this caller will match.

    Non-admins always get {published}, whatever they asked for. Admins get
    exactly the requested status, or {published} when none was given.
    """
    if not ctx.is_admin:
        return PUBLIC_STATUSES
    if requested is None:
        return PUBLIC_STATUSES
    return frozenset({requested})


def can_view(ctx: AuthContext, post: Post) -> bool:
    """List-view gate: status only, authorship is irrelevant."""
    return post.status in allowed_statuses(ctx)


def can_view_detail(ctx: AuthContext, post: Post) -> bool:
    """Single-item gate: the list gate, plus the author sees their own posts."""
    return can_view(ctx, post) or ctx.is_owner(post.author_id)
