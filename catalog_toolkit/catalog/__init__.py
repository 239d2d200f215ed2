"""
Catalog Module - authors, books and transactions.

Entities, their repositories, request models and the business services built
on the soft delete aware repository.
"""

from .entities import (
    Author,
    Base,
    Book,
    BookDetail,
    Transaction,
    TransactionDetail,
    TransactionDetailId,
)
from .repositories import (
    AuthorRepository,
    BookDetailRepository,
    BookRepository,
    TransactionDetailRepository,
    TransactionRepository,
)
from .schemas import (
    AuthorRequest,
    BookRequest,
    TransactionDetailRequest,
    TransactionRequest,
)
from .services import AuthorService, BookService, TransactionService

__all__ = [
    # Entities
    "Base",
    "Author",
    "Book",
    "BookDetail",
    "Transaction",
    "TransactionDetail",
    "TransactionDetailId",
    # Repositories
    "AuthorRepository",
    "BookRepository",
    "BookDetailRepository",
    "TransactionRepository",
    "TransactionDetailRepository",
    # Requests
    "AuthorRequest",
    "BookRequest",
    "TransactionDetailRequest",
    "TransactionRequest",
    # Services
    "AuthorService",
    "BookService",
    "TransactionService",
]
