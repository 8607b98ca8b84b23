"""
Shared FastAPI dependencies.

Collaborators are created once at startup and hung off app.state.
"""

from __future__ import annotations

from fastapi import Request

from inkpress.auth.jwt import TokenService
from inkpress.config import Settings
from inkpress.services import Accounts, PostLifecycle, PostQueryBuilder
from inkpress.storage import DocumentStore


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_tokens(request: Request) -> TokenService:
    return request.app.state.tokens


def get_accounts(request: Request) -> Accounts:
    return Accounts(request.app.state.store)


def get_lifecycle(request: Request) -> PostLifecycle:
    return PostLifecycle(
        request.app.state.store,
        excerpt_length=request.app.state.settings.excerpt_length,
    )


def get_query_builder(request: Request) -> PostQueryBuilder:
    settings: Settings = request.app.state.settings
    return PostQueryBuilder(
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )
