"""Repositories for the catalog entities."""

from typing import List

from ..soft_delete.repository import SoftDeleteRepository
from .entities import Author, Book, BookDetail, Transaction, TransactionDetail


class AuthorRepository(SoftDeleteRepository[Author]):
    entity_type = Author


class BookRepository(SoftDeleteRepository[Book]):
    entity_type = Book

    def find_all_by_author_id(self, author_id: int) -> List[Book]:
        """Visible books written by an author."""
        return self.find_all_by(Book.author_id == author_id)


class BookDetailRepository(SoftDeleteRepository[BookDetail]):
    entity_type = BookDetail


class TransactionRepository(SoftDeleteRepository[Transaction]):
    entity_type = Transaction


class TransactionDetailRepository(SoftDeleteRepository[TransactionDetail]):
    entity_type = TransactionDetail

    def find_all_by_transaction_id(self, transaction_id: int) -> List[TransactionDetail]:
        """Detail lines of a transaction, ordered by book id."""
        return self.find_all_by(TransactionDetail.transaction_id == transaction_id)
