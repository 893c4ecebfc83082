from sqlalchemy import select, update

from booklend.models.loan import BookLoan


class LoanRepo:
    def __init__(self, session):
        self.session = session

    def get(self, loan_id: int):
        return self.session.get(BookLoan, loan_id)

    def add(self, loan: BookLoan):
        self.session.add(loan)
        self.session.flush()
        return loan

    def close(self, loan_id: int, return_date) -> bool:
        """Active -> Returned as one conditional update; False if no open loan matched."""
        stmt = (
            update(BookLoan)
            .where(BookLoan.id == loan_id, BookLoan.returned.is_(False))
            .values(returned=True, return_date=return_date)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def list_by_book(self, book_id: int):
        stmt = select(BookLoan).where(BookLoan.book_id == book_id).order_by(BookLoan.id.desc())
        return self.session.execute(stmt).scalars().all()

    def list_open(self, book_id: int | None = None):
        stmt = select(BookLoan).where(BookLoan.returned.is_(False))
        if book_id is not None:
            stmt = stmt.where(BookLoan.book_id == book_id)
        return self.session.execute(stmt.order_by(BookLoan.id.desc())).scalars().all()

    def list_all(self):
        return self.session.execute(select(BookLoan).order_by(BookLoan.id.desc())).scalars().all()
