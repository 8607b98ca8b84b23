"""
Accounts - registration, credential checks, and admin user management.

The user record in the store is the source of truth for role and active
flag; only admins change either.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from inkpress.auth.context import AuthContext
from inkpress.auth.jwt import hash_password, verify_password
from inkpress.core.errors import AuthFailure, Conflict, NotFound, Unauthenticated, ValidationError
from inkpress.core.models import Identity, Role, User, UserAdminUpdate, UserCreate
from inkpress.core.utils import utc_now
from inkpress.services.post_lifecycle import validate_input
from inkpress.storage import DESCENDING, Collections, DocumentStore, DuplicateKeyError, StoreQuery, TextMatch

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGES = {
    "email": "Email already registered",
    "username": "Username already taken",
}


def _conflict(field: str) -> Conflict:
    return Conflict(field, DUPLICATE_MESSAGES.get(field, f"{field} already exists"))


def public_user(user: User | Identity) -> dict[str, Any]:
    """User data returned to clients (no password hash)."""
    data = {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role.value,
        "is_active": user.is_active,
    }
    if isinstance(user, User):
        data["created_at"] = user.created_at
    return data


class Accounts:
    """User registration and management over the document store."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get(self, user_id: str) -> User:
        doc = await self.store.get(Collections.USERS, user_id)
        if doc is None:
            raise NotFound("User not found")
        return User.model_validate(doc)

    async def register(self, payload: UserCreate | dict[str, Any]) -> User:
        """Create a regular, active user. Duplicate email/username is a Conflict."""
        data: UserCreate = validate_input(UserCreate, payload)
        email = str(data.email).lower()

        if await self.store.find_one(Collections.USERS, {"email": email}):
            raise _conflict("email")
        if await self.store.find_one(Collections.USERS, {"username": data.username}):
            raise _conflict("username")

        user = User(
            username=data.username,
            email=email,
            password_hash=hash_password(data.password),
        )
        try:
            await self.store.insert(Collections.USERS, user.id, user.model_dump())
        except DuplicateKeyError as e:
            raise _conflict(e.field)

        logger.info(f"Registered user {user.id} ({user.username})")
        return user

    async def authenticate_credentials(self, email: str, password: str) -> User:
        """Email + password login. Unknown email and wrong password look the same."""
        doc = await self.store.find_one(Collections.USERS, {"email": (email or "").strip().lower()})
        if doc is None:
            raise Unauthenticated(AuthFailure.INVALID_CREDENTIALS)

        user = User.model_validate(doc)
        if not verify_password(password, user.password_hash):
            raise Unauthenticated(AuthFailure.INVALID_CREDENTIALS)
        if not user.is_active:
            raise Unauthenticated(AuthFailure.USER_DEACTIVATED)
        return user

    async def ensure_admin(self, username: str, email: str, password: str) -> User:
        """Create the bootstrap admin account unless the email is already taken."""
        doc = await self.store.find_one(Collections.USERS, {"email": email.strip().lower()})
        if doc is not None:
            return User.model_validate(doc)

        user = await self.register(UserCreate(username=username, email=email, password=password))
        doc = await self.store.update(Collections.USERS, user.id, {"role": Role.ADMIN})
        logger.info(f"Bootstrap admin {user.id} ({user.username}) created")
        return User.model_validate(doc)

    # -------------------------------------------------------------------------
    # Admin operations
    # -------------------------------------------------------------------------

    async def list_users(
        self,
        ctx: AuthContext,
        search: str | None = None,
        role: str | None = None,
        page: int = 1,
        page_size: int = 10,
        max_page_size: int = 100,
    ) -> dict[str, Any]:
        ctx.require_role(Role.ADMIN)
        page = max(1, page)
        page_size = min(max(1, page_size), max_page_size)

        equals: dict[str, Any] = {}
        if role:
            try:
                equals["role"] = Role(role)
            except ValueError:
                raise ValidationError.for_field("role", "Invalid role")

        query = StoreQuery(
            equals=equals,
            text=TextMatch(("username", "email"), search.strip()) if search and search.strip() else None,
            sort=(("created_at", DESCENDING), ("id", DESCENDING)),
            skip=(page - 1) * page_size,
            limit=page_size,
        )
        docs = await self.store.find(Collections.USERS, query)
        total = await self.store.count(Collections.USERS, query)
        return {
            "items": [public_user(User.model_validate(d)) for d in docs],
            "total": total,
            "page": page,
            "page_size": page_size,
            "total_pages": math.ceil(total / page_size),
        }

    async def view(self, ctx: AuthContext, user_id: str) -> User:
        """Profile read for the user themself or an admin."""
        ctx.require_owner_or_role(user_id, Role.ADMIN)
        return await self.get(user_id)

    async def admin_update(
        self, ctx: AuthContext, user_id: str, payload: UserAdminUpdate | dict[str, Any]
    ) -> User:
        admin = ctx.require_role(Role.ADMIN)
        data: UserAdminUpdate = validate_input(UserAdminUpdate, payload)
        user = await self.get(user_id)

        changes: dict[str, Any] = {}
        if data.username and data.username != user.username:
            if await self.store.find_one(Collections.USERS, {"username": data.username}):
                raise _conflict("username")
            changes["username"] = data.username
        if data.email:
            email = str(data.email).lower()
            if email != user.email:
                if await self.store.find_one(Collections.USERS, {"email": email}):
                    raise _conflict("email")
                changes["email"] = email
        if data.role is not None:
            changes["role"] = data.role
        if data.is_active is not None:
            changes["is_active"] = data.is_active
        changes["updated_at"] = utc_now()

        try:
            doc = await self.store.update(Collections.USERS, user_id, changes)
        except DuplicateKeyError as e:
            raise _conflict(e.field)
        if doc is None:
            raise NotFound("User not found")

        logger.info(f"Admin {admin.id} updated user {user_id}: {sorted(k for k in changes if k != 'updated_at')}")
        return User.model_validate(doc)

    async def admin_delete(self, ctx: AuthContext, user_id: str) -> int:
        """Delete a user and all of their posts. Returns the number of posts removed."""
        admin = ctx.require_role(Role.ADMIN)
        await self.get(user_id)
        if user_id == admin.id:
            raise ValidationError.for_field("id", "Cannot delete your own account")

        removed = await self.store.delete_many(Collections.POSTS, {"author_id": user_id})
        await self.store.delete(Collections.USERS, user_id)
        logger.info(f"Admin {admin.id} deleted user {user_id} and {removed} posts")
        return removed
