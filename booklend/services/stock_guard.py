# booklend/services/stock_guard.py
"""
Atomic counter updates on books.available.

Every mutation of ``available`` is a single conditional UPDATE whose WHERE
clause carries the guard, so the check and the write happen in one statement
and the store serializes concurrent callers on the row. Each method returns
True when exactly one row was changed. Nothing here reads ``available`` first.
Callers own the transaction (commit/rollback).
"""
from sqlalchemy import case, update

from booklend.models.book import Book
from booklend.repositories.book_repo import open_loan_count
from booklend.utils.clock import utcnow


class StockGuard:
    def __init__(self, session):
        self.session = session

    def _apply(self, stmt) -> bool:
        result = self.session.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount == 1

    def reserve(self, book_id: int) -> bool:
        """available -= 1 where available > 0."""
        stmt = (
            update(Book)
            .where(Book.id == book_id, Book.available > 0)
            .values(available=Book.available - 1, last_modified=utcnow())
        )
        return self._apply(stmt)

    def release(self, book_id: int) -> bool:
        """available += 1 where available < copies."""
        stmt = (
            update(Book)
            .where(Book.id == book_id, Book.available < Book.copies)
            .values(available=Book.available + 1, last_modified=utcnow())
        )
        return self._apply(stmt)

    def resize(self, isbn: str, new_copies: int) -> bool:
        """
        copies := new_copies, available shifted by the same delta so the number
        on loan is unchanged. Refused when new_copies < copies on loan.
        """
        on_loan = Book.copies - Book.available
        stmt = (
            update(Book)
            .where(Book.isbn == isbn, on_loan <= new_copies)
            # right-hand sides read the pre-update row
            .values(
                available=Book.available + (new_copies - Book.copies),
                copies=new_copies,
                last_modified=utcnow(),
            )
        )
        return self._apply(stmt)

    def reconcile(self, isbn: str) -> bool:
        """available := copies - open loans, floored at zero."""
        open_loans = open_loan_count()
        stmt = (
            update(Book)
            .where(Book.isbn == isbn)
            .values(
                available=case((open_loans > Book.copies, 0), else_=Book.copies - open_loans),
                last_modified=utcnow(),
            )
        )
        return self._apply(stmt)
