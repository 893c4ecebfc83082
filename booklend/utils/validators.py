# booklend/utils/validators.py
"""
Shape rules checked before any write reaches the store.

The same rules exist as CHECK/UNIQUE constraints on the tables, so a row that
slips past these (raw ORM insert, another client) is still rejected and
reported with the same error class.
"""
from datetime import date, datetime, timedelta, timezone

from booklend.errors import (
    InvalidCopies,
    InvalidISBN,
    InvalidLoanPeriod,
    InvalidName,
    LoanDurationExceeded,
    MissingField,
    RatingOutOfRange,
    TitleTooLong,
    ValidationError,
)

ISBN_LENGTH = 13
TITLE_MAX_LENGTH = 200
RATING_MIN, RATING_MAX = 1, 5
LOAN_MAX_DAYS = 30


def validate_isbn(isbn) -> str:
    if isbn is None:
        raise MissingField("isbn")
    if not isinstance(isbn, str) or len(isbn) != ISBN_LENGTH:
        raise InvalidISBN(isbn)
    return isbn


def validate_title(title) -> str:
    # "" is a valid title, None is not
    if title is None:
        raise MissingField("title")
    if not isinstance(title, str):
        raise ValidationError(f"title must be a string: {title!r}", field="title")
    if len(title) > TITLE_MAX_LENGTH:
        raise TitleTooLong(len(title), TITLE_MAX_LENGTH)
    return title


def validate_copies(copies) -> int:
    if isinstance(copies, bool) or not isinstance(copies, int) or copies < 0:
        raise InvalidCopies(copies)
    return copies


def validate_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise RatingOutOfRange(rating)
    if not RATING_MIN <= rating <= RATING_MAX:
        raise RatingOutOfRange(rating)
    return rating


def validate_ids(field: str, ids) -> list:
    """A list of integer row ids; None means none."""
    if ids is None:
        return []
    if not isinstance(ids, (list, tuple, set, frozenset)):
        raise ValidationError(f"{field} must be a list of ids: {ids!r}", field=field)
    for value in ids:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{field} must contain integer ids: {value!r}", field=field)
    return list(ids)


def validate_name(field: str, value, max_length: int = 200) -> str:
    if value is None:
        raise MissingField(field)
    value = str(value).strip()
    if not value or len(value) > max_length:
        raise InvalidName(field, max_length)
    return value


def as_datetime(value, field: str = "date") -> datetime:
    """
    Naive UTC datetime, the form utcnow() produces and the tables store.
    Aware values are converted to UTC; plain dates are taken as midnight so
    loan periods compare in whole days.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise ValidationError(f"{field} must be a date or datetime: {value!r}", field=field)


def validate_loan_period(loan_date, due_date, max_days: int = LOAN_MAX_DAYS):
    """
    due_date - loan_date must lie in [0, max_days] days, bounds inclusive.
    Returns both values normalised to datetime.
    """
    if loan_date is None:
        raise MissingField("loan_date")
    if due_date is None:
        raise MissingField("due_date")

    loan_dt = as_datetime(loan_date, "loan_date")
    due_dt = as_datetime(due_date, "due_date")

    if due_dt < loan_dt:
        raise InvalidLoanPeriod(loan_dt, due_dt)

    span = due_dt - loan_dt
    if span > timedelta(days=max_days):
        raise LoanDurationExceeded(span.days, max_days)
    return loan_dt, due_dt
