"""
Tests for the auth chain: token → identity resolution and the gates.
"""

from datetime import timedelta

import pytest

from inkpress.auth import (
    AuthContext,
    authenticate,
    authenticate_optional,
    require_owner_or_role,
    require_role_of,
)
from inkpress.core.errors import AuthFailure, Forbidden, Unauthenticated
from inkpress.core.models import Identity, Role
from inkpress.core.utils import utc_now
from inkpress.storage import Collections

from conftest import ctx_for


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_resolves_identity(self, store, tokens, make_user):
        alice = await make_user("alice")
        ctx = await authenticate(tokens.issue(alice.to_identity()), store, tokens)

        assert ctx.is_authenticated
        assert ctx.user_id == alice.id
        assert ctx.identity.username == "alice"

    @pytest.mark.asyncio
    async def test_no_token(self, store, tokens):
        with pytest.raises(Unauthenticated) as exc:
            await authenticate(None, store, tokens)
        assert exc.value.reason == AuthFailure.NO_TOKEN
        assert "No token provided" in exc.value.message

    @pytest.mark.asyncio
    async def test_invalid_token(self, store, tokens):
        with pytest.raises(Unauthenticated) as exc:
            await authenticate("invalid-token", store, tokens)
        assert exc.value.reason == AuthFailure.INVALID_TOKEN

    @pytest.mark.asyncio
    async def test_expired_token(self, store, tokens, make_user):
        alice = await make_user("alice")
        token = tokens.issue(alice.to_identity(), now=utc_now() - timedelta(days=8))
        with pytest.raises(Unauthenticated) as exc:
            await authenticate(token, store, tokens)
        assert exc.value.reason == AuthFailure.EXPIRED_TOKEN

    @pytest.mark.asyncio
    async def test_user_not_found(self, store, tokens):
        ghost = Identity(id="user_ghost", username="ghost", email="ghost@example.com")
        with pytest.raises(Unauthenticated) as exc:
            await authenticate(tokens.issue(ghost), store, tokens)
        assert exc.value.reason == AuthFailure.USER_NOT_FOUND

    @pytest.mark.asyncio
    async def test_deactivated_user(self, store, tokens, make_user):
        bob = await make_user("bob", is_active=False)
        with pytest.raises(Unauthenticated) as exc:
            await authenticate(tokens.issue(bob.to_identity()), store, tokens)
        assert exc.value.reason == AuthFailure.USER_DEACTIVATED

    @pytest.mark.asyncio
    async def test_role_comes_from_store_not_token(self, store, tokens, make_user):
        """A demoted admin's old token carries role=admin; the store wins."""
        carol = await make_user("carol", role=Role.ADMIN)
        token = tokens.issue(carol.to_identity())
        await store.update(Collections.USERS, carol.id, {"role": Role.USER})

        ctx = await authenticate(token, store, tokens)
        assert not ctx.is_admin

    @pytest.mark.asyncio
    async def test_deactivation_applies_to_existing_tokens(self, store, tokens, make_user):
        dave = await make_user("dave")
        token = tokens.issue(dave.to_identity())
        await store.update(Collections.USERS, dave.id, {"is_active": False})

        with pytest.raises(Unauthenticated):
            await authenticate(token, store, tokens)


class TestAuthenticateOptional:
    @pytest.mark.asyncio
    async def test_no_token_is_anonymous(self, store, tokens):
        ctx = await authenticate_optional(None, store, tokens)
        assert ctx.is_anonymous

    @pytest.mark.asyncio
    async def test_bad_token_degrades_to_anonymous(self, store, tokens):
        ctx = await authenticate_optional("invalid-token", store, tokens)
        assert ctx.is_anonymous

    @pytest.mark.asyncio
    async def test_deactivated_degrades_to_anonymous(self, store, tokens, make_user):
        bob = await make_user("bob", is_active=False)
        ctx = await authenticate_optional(tokens.issue(bob.to_identity()), store, tokens)
        assert ctx.is_anonymous

    @pytest.mark.asyncio
    async def test_valid_token_identifies(self, store, tokens, make_user):
        alice = await make_user("alice")
        ctx = await authenticate_optional(tokens.issue(alice.to_identity()), store, tokens)
        assert ctx.user_id == alice.id


class TestGates:
    @pytest.mark.asyncio
    async def test_require_role(self, make_user):
        user = ctx_for(await make_user("user"))
        admin = ctx_for(await make_user("admin", role=Role.ADMIN))

        with pytest.raises(Unauthenticated):
            require_role_of(AuthContext.anonymous(), Role.ADMIN)
        with pytest.raises(Forbidden):
            require_role_of(user, Role.ADMIN)
        assert require_role_of(admin, Role.ADMIN).role == Role.ADMIN

    @pytest.mark.asyncio
    async def test_require_owner_or_role(self, make_user):
        owner = await make_user("owner")
        other = await make_user("other")
        admin = await make_user("admin", role=Role.ADMIN)

        assert require_owner_or_role(ctx_for(owner), owner.id, Role.ADMIN).id == owner.id
        assert require_owner_or_role(ctx_for(admin), owner.id, Role.ADMIN).id == admin.id
        with pytest.raises(Forbidden):
            require_owner_or_role(ctx_for(other), owner.id, Role.ADMIN)
        with pytest.raises(Unauthenticated):
            require_owner_or_role(AuthContext.anonymous(), owner.id, Role.ADMIN)
