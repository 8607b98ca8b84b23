# =============================================================================
# User API Routes
# =============================================================================
#
# Endpoints:
#   GET    /api/users            - List users (admin)
#   GET    /api/users/{id}       - Profile (self or admin)
#   GET    /api/users/{id}/posts - Author's published posts (public)
#   PUT    /api/users/{id}       - Change username/email/role/active (admin)
#   DELETE /api/users/{id}       - Delete user and their posts (admin)
#
# =============================================================================

from typing import Any

from fastapi import APIRouter, Body, Depends

from inkpress.api.deps import get_accounts, get_query_builder, get_store
from inkpress.api.responses import ok
from inkpress.auth.context import AuthContext
from inkpress.auth.policies import require_admin, require_auth
from inkpress.services import Accounts, PostFilters, PostQueryBuilder, run_query
from inkpress.services.accounts import public_user
from inkpress.storage import DocumentStore

router = APIRouter(prefix="/api/users", tags=["users"])


def _int(value: str | None, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


@router.get("")
async def list_users(
    page: str | None = None,
    limit: str | None = None,
    search: str | None = None,
    role: str | None = None,
    ctx: AuthContext = Depends(require_admin()),
    accounts: Accounts = Depends(get_accounts),
):
    """List all users (admin only)."""
    result = await accounts.list_users(
        ctx, search=search, role=role, page=_int(page, 1), page_size=_int(limit, 10)
    )
    items = result.pop("items")
    return ok(items, pagination=result)


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    ctx: AuthContext = Depends(require_auth()),
    accounts: Accounts = Depends(get_accounts),
):
    """Get a user profile (the user themself or an admin)."""
    user = await accounts.view(ctx, user_id)
    return ok(public_user(user))


@router.get("/{user_id}/posts")
async def get_user_posts(
    user_id: str,
    page: str | None = None,
    limit: str | None = None,
    accounts: Accounts = Depends(get_accounts),
    builder: PostQueryBuilder = Depends(get_query_builder),
    store: DocumentStore = Depends(get_store),
):
    """Published posts by one author. Always public scope, whoever asks."""
    await accounts.get(user_id)
    query = builder.build(
        AuthContext.anonymous(),
        PostFilters(author=user_id),
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
        },
    )


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    payload: Any = Body(default=None),
    ctx: AuthContext = Depends(require_admin()),
    accounts: Accounts = Depends(get_accounts),
):
    """Update a user's username, email, role or active flag (admin only)."""
    user = await accounts.admin_update(ctx, user_id, payload if payload is not None else {})
    return ok(public_user(user), message="User updated successfully")


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    ctx: AuthContext = Depends(require_admin()),
    accounts: Accounts = Depends(get_accounts),
):
    """Delete a user and their posts (admin only)."""
    await accounts.admin_delete(ctx, user_id)
    return ok(message="User and associated posts deleted successfully")
