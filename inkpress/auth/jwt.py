# =============================================================================
# JWT Session Tokens
# =============================================================================
#
# This module provides:
#   - Token issuing (7 day session tokens)
#   - Token verification (pure: token + secret, never touches storage)
#   - Password hashing
#
# =============================================================================

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import hashlib
import logging
import secrets

from pydantic import BaseModel
import jwt

from inkpress.config import Settings
from inkpress.core.models import Identity, Role
from inkpress.core.utils import generate_id, utc_now

logger = logging.getLogger(__name__)


# =============================================================================
# Models
# =============================================================================


class Claims(BaseModel):
    """Verified token claims."""
    sub: str  # user_id
    email: str
    role: Role
    iat: datetime
    exp: datetime
    jti: str  # unique token ID


# =============================================================================
# Token Errors
# =============================================================================


class TokenError(Exception):
    """Base exception for token errors."""
    pass


class TokenExpiredError(TokenError):
    """Token has expired."""
    pass


class TokenMalformedError(TokenError):
    """Token cannot be decoded or is missing claims."""
    pass


class TokenSignatureError(TokenError):
    """Token was not signed with our secret."""
    pass


# =============================================================================
# Token Service
# =============================================================================


class TokenService:
    """
    Issues and verifies signed session tokens.

    The secret is fixed at construction and read-only afterwards, so one
    instance can be shared by every request.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_days: int = 7,
    ):
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.ttl = timedelta(days=expire_days)

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenService:
        return cls(
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            expire_days=settings.jwt_expire_days,
        )

    def issue(self, identity: Identity, now: datetime | None = None) -> str:
        """Create a token carrying identity + role claims."""
        issued_at = now or utc_now()
        payload = {
            "sub": identity.id,
            "email": identity.email,
            "role": identity.role.value,
            "iat": issued_at,
            "exp": issued_at + self.ttl,
            "jti": generate_id("tok"),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Claims:
        """
        Decode and validate a token.

        Raises:
            TokenExpiredError: Token has expired
            TokenSignatureError: Signature does not match
            TokenMalformedError: Anything else wrong with the token
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidSignatureError:
            raise TokenSignatureError("Token signature is invalid")
        except jwt.InvalidTokenError as e:
            raise TokenMalformedError(f"Invalid token: {e}")

        try:
            return Claims(
                sub=payload["sub"],
                email=payload.get("email", ""),
                role=payload.get("role", Role.USER),
                iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                jti=payload.get("jti", ""),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise TokenMalformedError(f"Invalid claims: {e}")


# =============================================================================
# Password Hashing
# =============================================================================

def hash_password(password: str) -> str:
    """
    Hash a password using PBKDF2-SHA256.

    Returns: salt:hash format string
    """
    salt = secrets.token_hex(32)
    hash_bytes = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        salt.encode('utf-8'),
        iterations=100_000
    )
    return f"{salt}:{hash_bytes.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    try:
        salt, stored_hash = password_hash.split(':')
        hash_bytes = hashlib.pbkdf2_hmac(
            'sha256',
            password.encode('utf-8'),
            salt.encode('utf-8'),
            iterations=100_000
        )
        return secrets.compare_digest(hash_bytes.hex(), stored_hash)
    except (ValueError, AttributeError):
        return False
