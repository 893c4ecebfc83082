"""Error hierarchy for catalog and lending failures.

Every error names the offending field or entity key in its message and carries
an ``http_status`` so blueprints can answer without a lookup table.
Integrity errors raised by the store are reclassified into the same classes
local validation raises (see ``translate_integrity_error``).
"""
from __future__ import annotations

from sqlalchemy.exc import IntegrityError


class LibraryError(Exception):
    """Base exception for catalog and lending errors."""

    code = "library_error"
    http_status = 500

    def __init__(self, message: str, field: str | None = None, key=None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.key = key

    def to_response(self) -> dict:
        body = {"success": False, "code": self.code, "message": self.message}
        if self.field is not None:
            body["field"] = self.field
        if self.key is not None:
            body["key"] = self.key
        return body


# -----------------------------
# Rejected before reaching the store
# -----------------------------
class ValidationError(LibraryError):
    code = "validation_error"
    http_status = 400


class ConstraintViolation(LibraryError):
    """Uniqueness or check constraint rejected by the store."""

    code = "constraint_violation"
    http_status = 409


class MissingField(ValidationError):
    code = "missing_field"

    def __init__(self, field: str):
        super().__init__(f"{field} is required", field=field)


class InvalidISBN(ValidationError, ConstraintViolation):
    code = "invalid_isbn"
    http_status = 400

    def __init__(self, isbn):
        length = len(isbn) if isinstance(isbn, str) else None
        super().__init__(
            f"isbn must be exactly 13 characters (got {length}): {isbn!r}",
            field="isbn",
            key=isbn,
        )


class TitleTooLong(ValidationError, ConstraintViolation):
    code = "title_too_long"
    http_status = 400

    def __init__(self, length: int | None = None, max_length: int = 200):
        detail = f" (got {length})" if length is not None else ""
        super().__init__(f"title must be at most {max_length} characters{detail}", field="title")


class InvalidCopies(ValidationError, ConstraintViolation):
    code = "invalid_copies"
    http_status = 400

    def __init__(self, copies):
        super().__init__(f"copies must be a non-negative integer: {copies!r}", field="copies")


class InvalidName(ValidationError):
    code = "invalid_name"

    def __init__(self, field: str, max_length: int):
        super().__init__(f"{field} must be 1-{max_length} characters", field=field)


class RatingOutOfRange(ValidationError, ConstraintViolation):
    code = "rating_out_of_range"
    http_status = 400

    def __init__(self, rating=None):
        super().__init__(f"rating must be an integer between 1 and 5: {rating!r}", field="rating")


class InvalidLoanPeriod(ValidationError, ConstraintViolation):
    code = "invalid_loan_period"
    http_status = 400

    def __init__(self, loan_date=None, due_date=None):
        super().__init__(
            f"due_date {due_date} is before loan_date {loan_date}",
            field="due_date",
        )


class LoanDurationExceeded(ValidationError):
    code = "loan_duration_exceeded"

    def __init__(self, days: int, max_days: int = 30):
        super().__init__(
            f"due_date is {days} days after loan_date (max {max_days})",
            field="due_date",
        )


# -----------------------------
# Store constraints
# -----------------------------
class DuplicateISBN(ConstraintViolation):
    code = "duplicate_isbn"

    def __init__(self, isbn=None):
        super().__init__(f"a book with isbn {isbn!r} already exists", field="isbn", key=isbn)


class DuplicateCategoryName(ConstraintViolation):
    code = "duplicate_category_name"

    def __init__(self, name=None):
        super().__init__(f"a category named {name!r} already exists", field="name", key=name)


class DuplicateAssociation(ConstraintViolation):
    code = "duplicate_association"

    def __init__(self, entity: str, key=None):
        super().__init__(f"{entity} link {key!r} already exists", field=entity, key=key)


class BookOnLoan(ConstraintViolation):
    code = "book_on_loan"

    def __init__(self, isbn):
        super().__init__(f"book {isbn!r} has copies out on loan", field="isbn", key=isbn)


class CopiesBelowOnLoan(ConstraintViolation):
    code = "copies_below_on_loan"

    def __init__(self, isbn, new_copies: int, on_loan: int):
        super().__init__(
            f"cannot set copies of book {isbn!r} to {new_copies}: {on_loan} on loan",
            field="copies",
            key=isbn,
        )


# -----------------------------
# Lookup and lending outcomes
# -----------------------------
class NotFound(LibraryError):
    code = "not_found"
    http_status = 404

    def __init__(self, entity: str, key):
        super().__init__(f"{entity} not found: {key!r}", field=entity, key=key)
        self.entity = entity


class Unavailable(LibraryError):
    code = "unavailable"
    http_status = 409

    def __init__(self, book_id):
        super().__init__(f"no copies of book {book_id!r} available", field="book", key=book_id)


class AlreadyReturned(LibraryError):
    code = "already_returned"
    http_status = 409

    def __init__(self, loan_id):
        super().__init__(f"loan {loan_id!r} is already returned", field="loan", key=loan_id)


class ConcurrencyConflict(LibraryError):
    """A conditional update lost a race; safe to retry."""

    code = "concurrency_conflict"
    http_status = 503

    def __init__(self, entity: str, key):
        super().__init__(f"concurrent update on {entity} {key!r}, retry", field=entity, key=key)


def translate_integrity_error(exc: IntegrityError, **context) -> LibraryError:
    """
    Map a store IntegrityError to the error class local validation would raise.

    ``context`` supplies the keys used in the message (isbn, name, rating, ...).
    Matching is done on constraint names and on the ``table.column`` form
    SQLite uses in its UNIQUE messages.
    """
    text = str(getattr(exc, "orig", exc)).lower()

    if "not null" in text:
        column = text.rsplit(".", 1)[-1].strip() if "." in text else "field"
        return MissingField(column)
    if "uq_books_isbn" in text or "books.isbn" in text:
        return DuplicateISBN(context.get("isbn"))
    if "uq_categories_name" in text or "categories.name" in text:
        return DuplicateCategoryName(context.get("name"))
    if "book_authors" in text:
        return DuplicateAssociation("author", context.get("author_id"))
    if "book_categories" in text:
        return DuplicateAssociation("category", context.get("category_id"))
    if "ck_books_isbn_length" in text:
        return InvalidISBN(context.get("isbn"))
    if "ck_books_title_length" in text:
        return TitleTooLong()
    if "ck_books_copies_nonneg" in text:
        return InvalidCopies(context.get("copies"))
    if "ck_books_available_range" in text:
        key = context.get("isbn") or context.get("book_id")
        return ConstraintViolation(f"available must stay within 0..copies for book {key!r}", field="available", key=key)
    if "ck_reviews_rating_range" in text:
        return RatingOutOfRange(context.get("rating"))
    if "ck_book_loans_period" in text:
        return InvalidLoanPeriod(context.get("loan_date"), context.get("due_date"))
    return ConstraintViolation(f"store rejected write: {getattr(exc, 'orig', exc)}")
