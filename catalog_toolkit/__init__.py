"""
Catalog Toolkit - soft delete aware data access for a small book catalog.

The toolkit stores authors, books, book details and sales transactions. Its
core is a generic repository that hides soft deletion from the code using it:
reads skip rows whose ``deleted_at`` is set and ``delete`` stamps that column
instead of removing the row, for every entity type that carries it. Types
without the column are deleted physically, and ``hard_delete`` always is.

Key Features
------------
* **Generic Repository**: one implementation for soft and hard entity types
* **Capability Registry**: per type, cached decision whether deletes are soft
* **Predicates**: composable by-id (scalar or composite key) and not-deleted
  conditions
* **Audit Stamping**: created/updated columns written during flush
* **Catalog Services**: authors, books and transactions on top of the above

Quick Start
-----------
>>> from catalog_toolkit import BookRepository, session_scope
>>>
>>> with session_scope(factory) as session:
...     books = BookRepository(session)
...     books.delete(42)                # stamps deleted_at
...     assert books.find_one(42) is None

Documentation
-------------
See DESIGN.md for how each part is built.
"""

__version__ = "1.0.0"

from .catalog import (
    Author,
    AuthorRepository,
    AuthorService,
    Book,
    BookDetail,
    BookDetailRepository,
    BookRepository,
    BookService,
    Transaction,
    TransactionDetail,
    TransactionDetailRepository,
    TransactionRepository,
    TransactionService,
)
from .config import CatalogConfig, configure, get_config, set_config
from .db import build_engine, build_session_factory, init_db, session_scope
from .soft_delete import (
    EntityNotFoundError,
    Page,
    PageRequest,
    SoftDeleteRepository,
    Sort,
    supports_soft_delete,
)

__all__ = [
    # Soft delete core
    "SoftDeleteRepository",
    "supports_soft_delete",
    "EntityNotFoundError",
    "Page",
    "PageRequest",
    "Sort",
    # Catalog
    "Author",
    "Book",
    "BookDetail",
    "Transaction",
    "TransactionDetail",
    "AuthorRepository",
    "BookRepository",
    "BookDetailRepository",
    "TransactionRepository",
    "TransactionDetailRepository",
    "AuthorService",
    "BookService",
    "TransactionService",
    # Database
    "build_engine",
    "build_session_factory",
    "init_db",
    "session_scope",
    # Configuration
    "CatalogConfig",
    "get_config",
    "set_config",
    "configure",
]
