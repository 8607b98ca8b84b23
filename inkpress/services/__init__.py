"""
Services operating on the document store.

- visibility      which post statuses a caller may see
- post_query      list queries (filters, search, sort, pagination)
- post_lifecycle  create/update/delete/like/comment/view
- accounts        registration, login, admin user management
"""

from inkpress.services.accounts import Accounts
from inkpress.services.post_lifecycle import PostLifecycle
from inkpress.services.post_query import PostFilters, PostPage, PostQueryBuilder, SortOrder, run_query

__all__ = [
    "Accounts",
    "PostFilters",
    "PostLifecycle",
    "PostPage",
    "PostQueryBuilder",
    "SortOrder",
    "run_query",
]
