"""
Tests for the soft delete building blocks.

Covers audit stamping, the capability registry, predicate builders and the
paging value types.
"""

import logging
from datetime import datetime
from unittest.mock import patch

import pytest
from pydantic import ValidationError
from sqlalchemy.orm import Session

from catalog_toolkit.catalog import (
    Author,
    Base,
    Book,
    BookDetail,
    Transaction,
    TransactionDetail,
    TransactionDetailId,
)
from catalog_toolkit.config import configure
from catalog_toolkit.db import build_engine
from catalog_toolkit.soft_delete import (
    CapabilityError,
    CapabilityRegistry,
    Direction,
    InvalidIdentifierError,
    Order,
    Page,
    PageRequest,
    Sort,
    acting_as,
    by_id,
    conjoin,
    get_registry,
    identity_of,
    not_deleted,
    supports_soft_delete,
)


@pytest.fixture
def db_session():
    """Create an in-memory SQLite database session for testing."""
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    session = Session(bind=engine)

    yield session

    session.close()
    engine.dispose()


class PlainRecord:
    """Not mapped by SQLAlchemy."""


class TestAuditMixin:
    """Test audit stamping during flush."""

    def test_insert_stamps_creation_fields(self, db_session):
        """Test that inserts get created_at and the default actor."""
        author = Author(full_name="Frank Herbert")
        db_session.add(author)
        db_session.flush()

        assert isinstance(author.created_at, datetime)
        assert author.created_by == "SYSTEM"
        assert author.updated_at is None

    def test_update_stamps_updated_at(self, db_session):
        """Test that updates get updated_at and keep creation fields."""
        author = Author(full_name="Frank Herbert")
        db_session.add(author)
        db_session.flush()
        created_at = author.created_at

        author.full_name = "Frank Patrick Herbert"
        db_session.flush()

        assert author.updated_at is not None
        assert author.updated_at >= created_at
        assert author.created_at == created_at

    def test_bound_actor_is_recorded(self, db_session):
        """Test that the actor bound with acting_as becomes created_by."""
        with acting_as("librarian"):
            author = Author(full_name="Ursula K. Le Guin")
            db_session.add(author)
            db_session.flush()

        assert author.created_by == "librarian"

    def test_configured_default_actor(self, db_session):
        """Test that the configured default actor is used when none is bound."""
        configure(default_actor="importer")

        author = Author(full_name="Iain M. Banks")
        db_session.add(author)
        db_session.flush()

        assert author.created_by == "importer"

    def test_caller_audit_values_are_overwritten(self, db_session):
        """Test that audit values assigned by callers never reach an insert."""
        with acting_as("librarian"):
            author = Author(
                full_name="Octavia Butler",
                created_by="migration",
                created_at=datetime(2000, 1, 1),
                updated_at=datetime(2000, 1, 2),
            )
            db_session.add(author)
            db_session.flush()

        assert author.created_by == "librarian"
        assert author.created_at > datetime(2000, 1, 1)
        assert author.updated_at is None

    def test_update_keeps_creation_fields(self, db_session):
        """Test that caller changes to creation fields are not written."""
        author = Author(full_name="Octavia Butler")
        db_session.add(author)
        db_session.flush()
        created_at = author.created_at

        author.created_by = "intruder"
        author.created_at = datetime(2000, 1, 1)
        author.full_name = "Octavia E. Butler"
        db_session.flush()
        db_session.expire_all()

        assert author.created_by == "SYSTEM"
        assert author.created_at == created_at
        assert author.full_name == "Octavia E. Butler"

    def test_to_dict(self, db_session):
        """Test column dictionary with and without audit fields."""
        author = Author(full_name="Frank Herbert")
        db_session.add(author)
        db_session.flush()

        full = author.to_dict()
        assert full["full_name"] == "Frank Herbert"
        assert full["deleted_at"] is None
        assert isinstance(full["created_at"], str)

        trimmed = author.to_dict(include_audit_fields=False)
        assert set(trimmed) == {"id", "full_name"}


class TestCapabilityRegistry:
    """Test per type soft delete capability detection."""

    def test_soft_types(self):
        """Test types carrying deleted_at are soft deletable."""
        assert supports_soft_delete(Author) is True
        assert supports_soft_delete(Book) is True
        assert supports_soft_delete(BookDetail) is True

    def test_hard_types(self):
        """Test types without deleted_at are hard types."""
        assert supports_soft_delete(Transaction) is False
        assert supports_soft_delete(TransactionDetail) is False

    def test_result_is_cached(self):
        """Test that each type is inspected once."""
        registry = CapabilityRegistry()

        with patch.object(
            CapabilityRegistry, "_inspect", return_value=True
        ) as mock_inspect:
            assert registry.supports_soft_delete(Book) is True
            assert registry.supports_soft_delete(Book) is True

        mock_inspect.assert_called_once_with(Book)
        assert Book in registry

    def test_unmapped_type_fails_safe(self, caplog):
        """Test that an uninspectable type is a hard type and is logged."""
        registry = CapabilityRegistry()

        with caplog.at_level(logging.WARNING):
            assert registry.supports_soft_delete(PlainRecord) is False

        assert "PlainRecord" in caplog.text

    def test_inspection_error_fails_safe_once(self, caplog):
        """Test that an inspection failure is logged and never retried."""
        registry = CapabilityRegistry()

        with patch(
            "catalog_toolkit.soft_delete.capabilities.inspect",
            side_effect=RuntimeError("mapper configuration broken"),
        ) as mock_inspect:
            with caplog.at_level(logging.WARNING):
                assert registry.supports_soft_delete(Book) is False
                assert registry.supports_soft_delete(Book) is False

        assert mock_inspect.call_count == 1
        assert "mapper configuration broken" in caplog.text

    def test_registration_overrides_inspection(self):
        """Test that a registered capability wins over the mapped columns."""
        registry = CapabilityRegistry()
        registry.register(Book, False)

        assert registry.supports_soft_delete(Book) is False

        registry.clear()
        assert registry.supports_soft_delete(Book) is True

    def test_soft_registration_requires_deletion_column(self):
        """Test that a type without deleted_at cannot be registered as soft."""
        registry = CapabilityRegistry()

        with pytest.raises(CapabilityError) as exc:
            registry.register(Transaction, True)

        assert exc.value.entity_type == "Transaction"
        assert Transaction not in registry
        assert registry.supports_soft_delete(Transaction) is False

        with pytest.raises(CapabilityError):
            registry.register(PlainRecord, True)

        registry.register(Transaction, False)
        assert registry.supports_soft_delete(Transaction) is False

    def test_global_registry(self):
        """Test that the shortcut uses the process-wide registry."""
        get_registry().register(Author, False)

        assert supports_soft_delete(Author) is False


class TestPredicates:
    """Test predicate builders."""

    def test_by_id_scalar(self):
        """Test equality on a single key column."""
        clause = str(by_id(Book, 7))

        assert "m_book.id" in clause

    def test_by_id_composite_tuple(self):
        """Test conjunction over composite key columns."""
        clause = str(by_id(TransactionDetail, TransactionDetailId(1, 2)))

        assert "t_transaction_detail.transaction_id" in clause
        assert "t_transaction_detail.book_id" in clause
        assert "AND" in clause

    def test_by_id_composite_mapping(self):
        """Test composite identifiers given by column name."""
        clause = str(by_id(TransactionDetail, {"book_id": 2, "transaction_id": 1}))

        assert "t_transaction_detail.transaction_id" in clause
        assert "t_transaction_detail.book_id" in clause

    def test_by_id_rejects_wrong_arity(self):
        """Test that a scalar id for a composite key is rejected."""
        with pytest.raises(InvalidIdentifierError) as exc:
            by_id(TransactionDetail, 1)

        assert "expected 2 key component(s)" in str(exc.value)

    def test_by_id_rejects_none(self):
        """Test that None identifiers are rejected."""
        with pytest.raises(InvalidIdentifierError):
            by_id(Book, None)

        with pytest.raises(InvalidIdentifierError):
            by_id(TransactionDetail, (1, None))

    def test_by_id_rejects_missing_mapping_key(self):
        """Test that a mapping without every key column is rejected."""
        with pytest.raises(InvalidIdentifierError) as exc:
            by_id(TransactionDetail, {"transaction_id": 1})

        assert "book_id" in str(exc.value)

    def test_invalid_identifier_is_value_error(self):
        """Test that callers can treat malformed ids as ValueError."""
        with pytest.raises(ValueError):
            by_id(Book, (1, 2))

    def test_not_deleted(self):
        """Test the deletion timestamp null check."""
        clause = str(not_deleted(Book))

        assert "m_book.deleted_at IS NULL" in clause

    def test_not_deleted_requires_capability(self):
        """Test that hard types cannot be filtered on deleted_at."""
        with pytest.raises(CapabilityError) as exc:
            not_deleted(Transaction)

        assert "Transaction" in str(exc.value)

    def test_conjoin(self):
        """Test conjunction of predicates."""
        assert str(conjoin()) == "true"
        single = not_deleted(Book)
        assert conjoin(single) is single

        clause = str(conjoin(by_id(Book, 1), not_deleted(Book)))
        assert "m_book.id" in clause
        assert "deleted_at IS NULL" in clause
        assert "AND" in clause

    def test_identity_of(self, db_session):
        """Test primary key extraction from instances."""
        author = Author(full_name="Frank Herbert")
        assert identity_of(author) is None

        db_session.add(author)
        db_session.flush()
        assert identity_of(author) == author.id

        detail = TransactionDetail(transaction_id=3, book_id=4, qty=1, price=10)
        assert identity_of(detail) == (3, 4)


class TestPagingModels:
    """Test sort and page value types."""

    def test_sort_by(self):
        """Test shorthand sort parsing."""
        sort = Sort.by("title", "-price")

        assert sort.orders == [
            Order(attribute="title", direction=Direction.ASC),
            Order(attribute="price", direction=Direction.DESC),
        ]
        assert bool(sort) is True
        assert bool(Sort.unsorted()) is False

    def test_page_request_validation(self):
        """Test page window bounds."""
        with pytest.raises(ValidationError):
            PageRequest(page=-1, size=10)

        with pytest.raises(ValidationError):
            PageRequest(page=0, size=0)

        request = PageRequest.of(2, 10, "-price")
        assert request.offset == 20
        assert request.next().page == 3
        assert request.sort.orders[0].direction == Direction.DESC

    def test_page_properties(self):
        """Test derived page counters."""
        page = Page(content=[1, 2], page=0, size=2, total_elements=5)

        assert page.total_pages == 3
        assert page.number_of_elements == 2
        assert page.has_next is True
        assert page.has_previous is False
        assert page.is_first is True
        assert page.is_last is False

        empty = Page(content=[], page=0, size=10, total_elements=0)
        assert empty.total_pages == 0
        assert empty.is_last is True

    def test_page_rejects_overfull_content(self):
        """Test that content cannot exceed the page size."""
        with pytest.raises(ValidationError):
            Page(content=[1, 2, 3], page=0, size=2, total_elements=3)
