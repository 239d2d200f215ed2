"""
Catalog services.

Business operations on authors, books and transactions. Services only talk
to repositories and never need to know which entity types are soft
deletable. They run inside the caller's unit of work and do not commit.
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from ..config import get_config
from ..soft_delete.exceptions import EntityNotFoundError
from .entities import Author, Book, BookDetail, Transaction, TransactionDetail
from .repositories import (
    AuthorRepository,
    BookDetailRepository,
    BookRepository,
    TransactionDetailRepository,
    TransactionRepository,
)
from .schemas import AuthorRequest, BookRequest, TransactionRequest

logger = logging.getLogger(__name__)


class AuthorService:
    """Author operations."""

    def __init__(self, session: Session):
        self.authors = AuthorRepository(session)

    def save(self, request: AuthorRequest) -> Author:
        logger.info(f"Save new author: {request.full_name}")
        return self.authors.save(Author(full_name=request.full_name))

    def get_all(self) -> List[Author]:
        logger.info("Get all authors")
        return self.authors.find_all()


class BookService:
    """Book and book detail operations."""

    def __init__(self, session: Session):
        self.authors = AuthorRepository(session)
        self.books = BookRepository(session)
        self.details = BookDetailRepository(session)

    def add_book(self, request: BookRequest) -> Book:
        """
        Create a book and its detail.

        Args:
            request: Book fields including author, page and weight

        Returns:
            The stored book

        Raises:
            ValueError: If a field required for creation is missing
            EntityNotFoundError: If the author is absent or deleted
        """
        request.require_new_book_fields()
        logger.info(f"Save new book: {request.title}")

        author = self.authors.find_one(request.author_id)
        if author is None:
            raise EntityNotFoundError(Author.__name__, request.author_id)

        book = Book(
            author=author,
            title=request.title,
            price=request.price,
            detail=BookDetail(page=request.page, weight=request.weight),
        )
        return self.books.save(book)

    def get_all_books(self) -> List[Book]:
        return self.books.find_all()

    def get_book(self, book_id: int) -> Book:
        book = self.books.find_one(book_id)
        if book is None:
            raise EntityNotFoundError(Book.__name__, book_id)
        return book

    def get_book_detail(self, book_id: int) -> BookDetail:
        logger.info(f"Find book detail by book id: {book_id}")
        detail = self.details.find_one(book_id)
        if detail is None:
            raise EntityNotFoundError(BookDetail.__name__, book_id)
        return detail

    def delete_book(self, book_id: int) -> None:
        """
        Soft delete a book, and its detail when cascading is configured.

        Both deletes run in the caller's unit of work, so they commit or roll
        back together.

        Raises:
            EntityNotFoundError: If the book is absent or already deleted
        """
        logger.info(f"Delete book: {book_id}")
        self.books.delete(book_id)
        if get_config().cascade_soft_delete and self.details.exists(book_id):
            self.details.delete(book_id)

    def purge_book(self, book_id: int) -> None:
        """
        Permanently remove a book and its detail, deleted or not.

        Raises:
            EntityNotFoundError: If no book row exists at all
        """
        logger.info(f"Purge book: {book_id}")
        try:
            self.details.hard_delete_by_id(book_id)
        except EntityNotFoundError:
            logger.debug(f"Book {book_id} has no detail row")
        self.books.hard_delete_by_id(book_id)

    def update_price(self, book_id: int, price: int) -> Book:
        """
        Change the price of a visible book.

        Raises:
            EntityNotFoundError: If the book is absent or deleted
        """
        logger.info(f"Update price of book {book_id} to {price}")
        book = self.get_book(book_id)
        book.price = price
        return self.books.save(book)


class TransactionService:
    """Transaction operations."""

    def __init__(self, session: Session):
        self.books = BookRepository(session)
        self.transactions = TransactionRepository(session)
        self.transaction_details = TransactionDetailRepository(session)

    def create_transaction(self, request: TransactionRequest) -> Transaction:
        """
        Record a sale.

        Each line is priced at book price times quantity. Lines whose book is
        absent or deleted are skipped. Totals are the sums of the kept lines.

        Args:
            request: Customer name and requested lines

        Returns:
            The stored transaction with its detail lines
        """
        logger.info(f"Create transaction for {request.customer_name}")
        transaction = Transaction(
            customer_name=request.customer_name,
            transaction_date=get_config().now(),
        )

        details: List[TransactionDetail] = []
        for line in request.details:
            book = self.books.find_one(line.book_id)
            if book is None:
                logger.warning(f"Skipping unknown book {line.book_id}")
                continue
            details.append(
                TransactionDetail(book=book, qty=line.qty, price=book.price * line.qty)
            )

        transaction.total_price = sum(detail.price for detail in details)
        transaction.total_qty = sum(detail.qty for detail in details)
        transaction.details = details
        return self.transactions.save(transaction)

    def get_transaction(self, transaction_id: int) -> Transaction:
        transaction = self.transactions.find_one(transaction_id)
        if transaction is None:
            raise EntityNotFoundError(Transaction.__name__, transaction_id)
        return transaction

    def get_transaction_details(self, transaction_id: int) -> List[TransactionDetail]:
        return self.transaction_details.find_all_by_transaction_id(transaction_id)
