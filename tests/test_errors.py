"""Store-level constraints surface as the same error classes as local validation."""
from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from booklend.errors import (
    ConstraintViolation,
    DuplicateCategoryName,
    DuplicateISBN,
    InvalidISBN,
    InvalidLoanPeriod,
    MissingField,
    NotFound,
    RatingOutOfRange,
    TitleTooLong,
    translate_integrity_error,
)
from booklend.extensions import db
from booklend.models.book import Book
from booklend.models.category import Category
from booklend.models.loan import BookLoan
from booklend.models.review import Review


def _store_error(*rows, **context):
    with pytest.raises(IntegrityError) as exc:
        for row in rows:
            db.session.add(row)
        db.session.commit()
    db.session.rollback()
    return translate_integrity_error(exc.value, **context)


def test_rating_check_constraint(app):
    db.session.add(Review(rating=5, comment="ok"))
    db.session.commit()

    err = _store_error(Review(rating=6, comment="Too high"), rating=6)
    assert isinstance(err, RatingOutOfRange)
    assert isinstance(err, ConstraintViolation)


def test_unique_isbn_constraint(app):
    db.session.add(Book(isbn="9785555555555", title="One", copies=0, available=0))
    db.session.commit()

    err = _store_error(Book(isbn="9785555555555", title="Two", copies=0, available=0), isbn="9785555555555")
    assert isinstance(err, DuplicateISBN)
    assert "9785555555555" in str(err)


def test_missing_isbn_is_not_a_duplicate(app):
    err = _store_error(Book(isbn=None, title="No Isbn", copies=0, available=0))
    assert isinstance(err, MissingField)
    assert err.field == "isbn"


def test_isbn_length_constraint(app):
    err = _store_error(Book(isbn="123", title="Short", copies=0, available=0), isbn="123")
    assert isinstance(err, InvalidISBN)


def test_title_length_constraint(app):
    err = _store_error(Book(isbn="9785555555556", title="T" * 201, copies=0, available=0))
    assert isinstance(err, TitleTooLong)


def test_available_above_copies_rejected(app):
    err = _store_error(Book(isbn="9785555555557", title="Over", copies=1, available=2))
    assert isinstance(err, ConstraintViolation)


def test_category_name_constraint(app):
    db.session.add(Category(name="Computers"))
    db.session.commit()
    err = _store_error(Category(name="Computers"), name="Computers")
    assert isinstance(err, DuplicateCategoryName)


def test_loan_period_constraint(app):
    book = Book(isbn="9785555555558", title="Dated", copies=1, available=1)
    db.session.add(book)
    db.session.commit()
    err = _store_error(BookLoan(
        book_id=book.id,
        loan_date=datetime(2025, 2, 1),
        due_date=datetime(2025, 1, 1),
    ))
    assert isinstance(err, InvalidLoanPeriod)


def test_error_messages_name_the_key():
    err = NotFound("book", "9780000000001")
    assert "book" in str(err) and "9780000000001" in str(err)
    body = err.to_response()
    assert body["success"] is False
    assert body["code"] == "not_found"
    assert body["key"] == "9780000000001"
