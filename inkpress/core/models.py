"""
Core data models for the inkpress platform.

Users (identities), posts with their embedded comments, and categories.
Fields derived from other fields (slug, excerpt, counts) are computed by
the plain functions at the bottom of this module, never by the store.
"""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from inkpress.core.utils import generate_id, slugify, utc_now


# =============================================================================
# Enums
# =============================================================================


class Role(str, Enum):
    """Platform-wide role. Closed set: unknown strings never validate."""

    USER = "user"
    ADMIN = "admin"


class PostStatus(str, Enum):
    """Publication status of a post."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


# =============================================================================
# Identity
# =============================================================================


class Identity(BaseModel):
    """An authenticated caller, as resolved fresh from the store."""

    id: str
    username: str
    email: str
    role: Role = Role.USER
    is_active: bool = True

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class User(Identity):
    """User stored in the database."""

    id: str = Field(default_factory=lambda: generate_id("user"))
    password_hash: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def to_identity(self) -> Identity:
        return Identity(
            id=self.id,
            username=self.username,
            email=self.email,
            role=self.role,
            is_active=self.is_active,
        )


# =============================================================================
# Posts
# =============================================================================


class Category(BaseModel):
    """Referenced by id only; the core never inspects it beyond existence."""

    id: str = Field(default_factory=lambda: generate_id("cat"))
    name: str
    color: str = "#3B82F6"


class Comment(BaseModel):
    """Append-only comment embedded in a post."""

    author_id: str
    content: str
    created_at: datetime = Field(default_factory=utc_now)


class Post(BaseModel):
    """A blog post as persisted."""

    id: str = Field(default_factory=lambda: generate_id("post"))

    title: str
    content: str
    slug: str
    excerpt: str = ""

    author_id: str
    category_id: str | None = None
    tags: list[str] = Field(default_factory=list)

    status: PostStatus = PostStatus.PUBLISHED
    views: int = 0
    liked_by: list[str] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def like_count(self) -> int:
        return len(self.liked_by)

    @property
    def comment_count(self) -> int:
        return len(self.comments)

    @property
    def reading_time(self) -> int:
        return reading_time(self.content)


# =============================================================================
# Inputs
# =============================================================================


class PostCreate(BaseModel):
    """Body of a create request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=3, max_length=200)
    content: str = Field(min_length=10)
    excerpt: str | None = Field(default=None, max_length=300)
    category: str | None = None
    tags: list[str] = Field(default_factory=list)
    status: PostStatus | None = None


class PostUpdate(BaseModel):
    """Body of an update request. Omitted fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(default=None, min_length=3, max_length=200)
    content: str | None = Field(default=None, min_length=10)
    excerpt: str | None = Field(default=None, max_length=300)
    category: str | None = None
    tags: list[str] | None = None
    status: PostStatus | None = None


class CommentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(min_length=1, max_length=1000)


class UserCreate(BaseModel):
    """User registration data."""

    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(min_length=6)


class UserAdminUpdate(BaseModel):
    """Fields only an admin may change on a user."""

    model_config = ConfigDict(str_strip_whitespace=True)

    username: str | None = Field(default=None, min_length=3, max_length=30)
    email: EmailStr | None = None
    role: Role | None = None
    is_active: bool | None = None


# =============================================================================
# Derived fields
# =============================================================================


WORDS_PER_MINUTE = 200


def make_slug(title: str) -> str:
    """URL slug derived from a title. Uniqueness is handled by the caller."""
    return slugify(title)


def make_excerpt(content: str, length: int = 150) -> str:
    """Default excerpt: the first `length` characters plus an ellipsis."""
    return content[:length] + "..."


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Trim, lower-case and de-duplicate, keeping first-seen order."""
    seen: list[str] = []
    for tag in tags or []:
        tag = tag.strip().lower()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def reading_time(content: str) -> int:
    """Estimated minutes to read."""
    words = len(content.split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))
