"""
Authentication and authorization.

- TokenService issues and verifies signed session tokens
- the auth chain (authenticate, optional auth, role and ownership gates)
  resolves every request into an AuthContext
"""

from inkpress.auth.context import AuthContext
from inkpress.auth.jwt import (
    Claims,
    TokenError,
    TokenExpiredError,
    TokenMalformedError,
    TokenService,
    TokenSignatureError,
    hash_password,
    verify_password,
)
from inkpress.auth.policies import (
    authenticate,
    authenticate_optional,
    optional_auth,
    require_admin,
    require_auth,
    require_owner_or_role,
    require_role,
    require_role_of,
)

__all__ = [
    # Main interface
    "AuthContext",
    "authenticate",
    "authenticate_optional",
    "require_role_of",
    "require_owner_or_role",
    # FastAPI dependencies
    "require_auth",
    "optional_auth",
    "require_role",
    "require_admin",
    # Tokens
    "Claims",
    "TokenService",
    "TokenError",
    "TokenExpiredError",
    "TokenMalformedError",
    "TokenSignatureError",
    "hash_password",
    "verify_password",
]
