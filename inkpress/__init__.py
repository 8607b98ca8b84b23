"""
Inkpress - blogging platform API.

Authenticated users author posts, visitors browse and search published
content. The interesting parts live in:

- inkpress.auth      token issuing/verification and the request auth chain
- inkpress.services  post visibility, list queries, and the post lifecycle
- inkpress.storage   the document store interface and in-memory backend
"""

__version__ = "0.1.0"
