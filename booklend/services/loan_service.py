import logging
from datetime import timedelta

from sqlalchemy.exc import IntegrityError

from booklend.errors import (
    AlreadyReturned,
    ConcurrencyConflict,
    NotFound,
    Unavailable,
    translate_integrity_error,
)
from booklend.models.book import Book
from booklend.models.loan import BookLoan
from booklend.repositories.loan_repo import LoanRepo
from booklend.services.stock_guard import StockGuard
from booklend.utils.clock import utcnow
from booklend.utils.validators import LOAN_MAX_DAYS, as_datetime, validate_loan_period

logger = logging.getLogger(__name__)

DEFAULT_LOAN_DAYS = 14


class LoanService:
    """
    Issues and closes loans. A loan goes Active -> Returned exactly once.

    Both transitions are one transaction whose first write is the guarded
    counter update (StockGuard), so the availability check and the decrement
    can never be split across callers.
    """

    def __init__(self, session, max_days: int = LOAN_MAX_DAYS, default_days: int = DEFAULT_LOAN_DAYS):
        self.session = session
        self.loans = LoanRepo(session)
        self.stock = StockGuard(session)
        self.max_days = max_days
        self.default_days = default_days

    def get_loan(self, loan_id: int) -> BookLoan:
        loan = self.loans.get(loan_id)
        if loan is None:
            raise NotFound("loan", loan_id)
        return loan

    def list_loans(self, book_id: int | None = None, open_only: bool = False):
        if open_only:
            return self.loans.list_open(book_id)
        if book_id is not None:
            return self.loans.list_by_book(book_id)
        return self.loans.list_all()

    def issue_loan(self, book_id: int, loan_date=None, due_date=None) -> BookLoan:
        if loan_date is None:
            loan_date = utcnow()
        if due_date is None:
            due_date = as_datetime(loan_date, "loan_date") + timedelta(days=self.default_days)
        loan_date, due_date = validate_loan_period(loan_date, due_date, self.max_days)

        try:
            if not self.stock.reserve(book_id):
                self.session.rollback()
                raise self._issue_failure(book_id)

            loan = self.loans.add(
                BookLoan(book_id=book_id, loan_date=loan_date, due_date=due_date, returned=False)
            )
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise translate_integrity_error(
                e, book_id=book_id, loan_date=loan_date, due_date=due_date
            ) from e
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"[loans] issued loan={loan.id} book={book_id} due={due_date:%Y-%m-%d}")
        return loan

    def return_loan(self, loan_id: int, return_date=None) -> BookLoan:
        return_date = utcnow() if return_date is None else as_datetime(return_date, "return_date")

        try:
            if not self.loans.close(loan_id, return_date):
                self.session.rollback()
                raise self._return_failure(loan_id)

            loan = self.loans.get(loan_id)
            if not self.stock.release(loan.book_id):
                # only reachable if the counter drifted; the audit job reports it
                logger.warning(
                    f"[loans] book={loan.book_id} already at full stock when returning loan={loan_id}"
                )
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise translate_integrity_error(e, loan_id=loan_id) from e
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"[loans] returned loan={loan_id} book={loan.book_id}")
        return loan

    def _issue_failure(self, book_id: int):
        book = self.session.get(Book, book_id)
        if book is None:
            return NotFound("book", book_id)
        if book.available > 0:
            # a return was committed between the guarded update and this read
            return ConcurrencyConflict("book", book_id)
        return Unavailable(book_id)

    def _return_failure(self, loan_id: int):
        loan = self.loans.get(loan_id)
        if loan is None:
            return NotFound("loan", loan_id)
        return AlreadyReturned(loan_id)
