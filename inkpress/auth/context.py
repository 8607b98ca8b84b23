"""
Auth context - who is making the request.

This is the lightweight object passed to route handlers and services.
It is either Identified (wraps an Identity fetched fresh from the store)
or Anonymous, and it never changes for the lifetime of a request.
"""

from __future__ import annotations

from dataclasses import dataclass

from inkpress.core.errors import AuthFailure, Forbidden, Unauthenticated
from inkpress.core.models import Identity, Role


@dataclass(frozen=True)
class AuthContext:
    """
    Authorization context for a request.

    Usage in routes:
        async def my_route(ctx: AuthContext = Depends(require_auth())):
            print(f"User {ctx.user_id} is {ctx.role}")
    """

    identity: Identity | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def is_anonymous(self) -> bool:
        return self.identity is None

    @property
    def user_id(self) -> str | None:
        return self.identity.id if self.identity else None

    @property
    def role(self) -> Role | None:
        return self.identity.role if self.identity else None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def is_owner(self, resource_owner_id: str | None) -> bool:
        return self.user_id is not None and self.user_id == resource_owner_id

    def require_identity(self) -> Identity:
        """The identity, or Unauthenticated if this is an anonymous context."""
        if self.identity is None:
            raise Unauthenticated(AuthFailure.AUTHENTICATION_REQUIRED)
        return self.identity

    def require_role(self, role: Role) -> Identity:
        """
        Raise unless the caller holds `role`.

        Unauthenticated for anonymous callers, Forbidden for the wrong role.
        """
        identity = self.require_identity()
        if identity.role != role:
            raise Forbidden(f"Access denied. {role.value.capitalize()} privileges required.")
        return identity

    def require_owner_or_role(self, resource_owner_id: str | None, role: Role) -> Identity:
        """
        Raise unless the caller owns the resource or holds `role`.

        Usage:
            ctx.require_owner_or_role(post.author_id, Role.ADMIN)
        """
        identity = self.require_identity()
        if identity.id != resource_owner_id and identity.role != role:
            raise Forbidden(f"Access denied. Owner or {role.value} privileges required.")
        return identity

    @classmethod
    def anonymous(cls) -> AuthContext:
        """Create an anonymous context (no user)."""
        return cls()

    @classmethod
    def of(cls, identity: Identity) -> AuthContext:
        return cls(identity=identity)
