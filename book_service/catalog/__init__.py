"""
Catalog package for the book service.

This package holds the ``Book`` schemas, the SQLAlchemy-backed store and
the REST routes under ``/api/books``. Book reads are decorated with a
price asked from a local command-line model (see ``book_service.ai``).
"""

from .router import router as catalog_router  # noqa: F401
