"""
Domain error taxonomy.

Every failure the auth chain, visibility policy or post lifecycle can
produce is one of these. The API layer maps them to HTTP statuses and the
response envelope; nothing here knows about HTTP beyond the status code.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class InkpressError(Exception):
    """Base class for expected, recoverable failures."""

    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(InkpressError):
    """Bad input shape or length. Carries field-level detail."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: list[dict[str, Any]], message: str | None = None):
        self.errors = errors
        super().__init__(message)

    @classmethod
    def for_field(cls, field: str, message: str) -> ValidationError:
        return cls([{"field": field, "message": message}], message)

    @classmethod
    def from_pydantic(cls, exc: Any) -> ValidationError:
        """Convert a pydantic ValidationError into field errors."""
        errors = []
        for err in exc.errors():
            loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
            errors.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
        return cls(errors)


class AuthFailure(str, Enum):
    """Why a request could not be authenticated."""

    NO_TOKEN = "no_token"
    INVALID_TOKEN = "invalid_token"
    EXPIRED_TOKEN = "expired_token"
    USER_NOT_FOUND = "user_not_found"
    USER_DEACTIVATED = "user_deactivated"
    AUTHENTICATION_REQUIRED = "authentication_required"
    INVALID_CREDENTIALS = "invalid_credentials"


AUTH_FAILURE_MESSAGES: dict[AuthFailure, str] = {
    AuthFailure.NO_TOKEN: "Access denied. No token provided.",
    AuthFailure.INVALID_TOKEN: "Invalid token.",
    AuthFailure.EXPIRED_TOKEN: "Token expired.",
    AuthFailure.USER_NOT_FOUND: "Invalid token. User not found.",
    AuthFailure.USER_DEACTIVATED: "Account is deactivated.",
    AuthFailure.AUTHENTICATION_REQUIRED: "Access denied. Authentication required.",
    AuthFailure.INVALID_CREDENTIALS: "Invalid credentials",
}


class Unauthenticated(InkpressError):
    """Missing/invalid/expired token, unknown or deactivated account."""

    status_code = 401

    def __init__(self, reason: AuthFailure):
        self.reason = reason
        super().__init__(AUTH_FAILURE_MESSAGES[reason])


class Forbidden(InkpressError):
    """Authenticated, but lacking the role or ownership."""

    status_code = 403
    default_message = "Access denied"


class NotFound(InkpressError):
    """Absent, or outside the caller's visibility scope. Indistinguishable on purpose."""

    status_code = 404
    default_message = "Not found"


class Conflict(InkpressError):
    """A unique field is already taken."""

    status_code = 400

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"{field} already exists")
