"""
Policies - the auth chain that gates every route.

Route handlers just declare what they need:

    ctx: AuthContext = Depends(require_auth())       # must be logged in
    ctx: AuthContext = Depends(optional_auth())      # anonymous is fine
    ctx: AuthContext = Depends(require_role(Role.ADMIN))

Design:
- The bearer token is verified by the TokenService, then the user is
  re-fetched from the store. Role and active flag always come from the
  store record, never from the token payload (only the id claim is used).
- Failures are typed `Unauthenticated` / `Forbidden` errors; the API layer
  turns them into 401 / 403. No retries: this is a security boundary.
"""

from __future__ import annotations

import logging
from typing import Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from inkpress.auth.context import AuthContext
from inkpress.auth.jwt import TokenExpiredError, TokenError, TokenService
from inkpress.core.errors import AuthFailure, Unauthenticated
from inkpress.core.models import Identity, Role, User
from inkpress.integrations.sentry import set_user
from inkpress.storage import Collections, DocumentStore

logger = logging.getLogger(__name__)


# =============================================================================
# Core resolution (framework independent)
# =============================================================================


async def authenticate(
    token: str | None,
    store: DocumentStore,
    tokens: TokenService,
) -> AuthContext:
    """
    Resolve a bearer token into an identified context.

    Raises Unauthenticated with one of: no_token, invalid_token,
    expired_token, user_not_found, user_deactivated.
    """
    if not token:
        raise Unauthenticated(AuthFailure.NO_TOKEN)

    try:
        claims = tokens.verify(token)
    except TokenExpiredError:
        raise Unauthenticated(AuthFailure.EXPIRED_TOKEN)
    except TokenError as e:
        logger.info(f"Rejected token: {e}")
        raise Unauthenticated(AuthFailure.INVALID_TOKEN)

    doc = await store.get(Collections.USERS, claims.sub)
    if doc is None:
        raise Unauthenticated(AuthFailure.USER_NOT_FOUND)

    user = User.model_validate(doc)
    if not user.is_active:
        raise Unauthenticated(AuthFailure.USER_DEACTIVATED)

    return AuthContext.of(user.to_identity())


async def authenticate_optional(
    token: str | None,
    store: DocumentStore,
    tokens: TokenService,
) -> AuthContext:
    """Same as authenticate, but any auth failure degrades to anonymous."""
    try:
        return await authenticate(token, store, tokens)
    except Unauthenticated as e:
        if e.reason != AuthFailure.NO_TOKEN:
            logger.info(f"Optional auth fell back to anonymous: {e.reason.value}")
        return AuthContext.anonymous()


def require_role_of(ctx: AuthContext, role: Role) -> Identity:
    """ok | Unauthenticated (anonymous) | Forbidden (wrong role)."""
    return ctx.require_role(role)


def require_owner_or_role(ctx: AuthContext, resource_owner_id: str | None, role: Role) -> Identity:
    """ok iff the caller is the owner or holds `role`."""
    return ctx.require_owner_or_role(resource_owner_id, role)


# =============================================================================
# FastAPI dependencies
# =============================================================================


# Optional bearer (doesn't fail if no token; the chain decides)
optional_bearer = HTTPBearer(auto_error=False)


def _token(credentials: HTTPAuthorizationCredentials | None) -> str | None:
    return credentials.credentials if credentials else None


def _collaborators(request: Request) -> tuple[DocumentStore, TokenService]:
    return request.app.state.store, request.app.state.tokens


def require_auth() -> Callable:
    """Require an authenticated, active user."""

    async def dependency(
        request: Request,
        credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
    ) -> AuthContext:
        store, tokens = _collaborators(request)
        try:
            ctx = await authenticate(_token(credentials), store, tokens)
        except Unauthenticated as e:
            logger.info(f"Authentication failed: {e.reason.value} ({request.method} {request.url.path})")
            raise
        set_user(ctx.user_id, role=ctx.role.value)
        return ctx

    return dependency


def optional_auth() -> Callable:
    """Resolve the caller if possible, otherwise continue anonymously."""

    async def dependency(
        request: Request,
        credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
    ) -> AuthContext:
        store, tokens = _collaborators(request)
        return await authenticate_optional(_token(credentials), store, tokens)

    return dependency


def require_role(role: Role) -> Callable:
    """Require an authenticated user holding `role`."""
    authenticated = require_auth()

    async def dependency(ctx: AuthContext = Depends(authenticated)) -> AuthContext:
        require_role_of(ctx, role)
        return ctx

    return dependency


def require_admin() -> Callable:
    """Shorthand for require_role(Role.ADMIN)."""
    return require_role(Role.ADMIN)
