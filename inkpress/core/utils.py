"""
Shared utility functions for the inkpress platform.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from slugify import slugify as _slugify


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique ID with optional prefix.

    Args:
        prefix: Optional prefix (e.g., "user", "post", "cat")

    Returns:
        A unique ID like "post_a1b2c3d4e5f6"
    """
    uid = uuid.uuid4().hex[:12]
    return f"{prefix}_{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def slugify(text: str) -> str:
    """Transliterated, lower-cased, dash-separated. Never empty."""
    return _slugify(text or "") or "post"


def short_suffix() -> str:
    """Random tail used to separate colliding slugs."""
    return uuid.uuid4().hex[:6]
