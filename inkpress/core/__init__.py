"""
Core of inkpress: data models, derived-field helpers, and the error taxonomy.
"""

from inkpress.core.errors import (
    AuthFailure,
    Conflict,
    Forbidden,
    InkpressError,
    NotFound,
    Unauthenticated,
    ValidationError,
)
from inkpress.core.models import (
    Category,
    Comment,
    CommentCreate,
    Identity,
    Post,
    PostCreate,
    PostStatus,
    PostUpdate,
    Role,
    User,
    UserAdminUpdate,
    UserCreate,
)
from inkpress.core.utils import generate_id, slugify, utc_now

__all__ = [
    # Models
    "Category",
    "Comment",
    "CommentCreate",
    "Identity",
    "Post",
    "PostCreate",
    "PostStatus",
    "PostUpdate",
    "Role",
    "User",
    "UserAdminUpdate",
    "UserCreate",
    # Errors
    "AuthFailure",
    "Conflict",
    "Forbidden",
    "InkpressError",
    "NotFound",
    "Unauthenticated",
    "ValidationError",
    # Utils
    "generate_id",
    "slugify",
    "utc_now",
]
