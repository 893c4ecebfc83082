from sqlalchemy import delete, func, insert, select

from booklend.models.book import Book, BookAuthor, BookCategory
from booklend.models.loan import BookLoan


def open_loans_of_book(column=BookLoan.id):
    """Correlated select over the open loans of the enclosing statement's book row."""
    return (
        select(column)
        .where(BookLoan.book_id == Book.id, BookLoan.returned.is_(False))
        .correlate(Book)
    )


def open_loan_count():
    """Scalar subquery: number of open loans of the enclosing book row."""
    return open_loans_of_book(func.count(BookLoan.id)).scalar_subquery()


class BookRepo:
    def __init__(self, session):
        self.session = session

    def list_all(self):
        return self.session.execute(select(Book).order_by(Book.id.desc())).scalars().all()

    def get(self, book_id: int):
        return self.session.get(Book, book_id)

    def get_by_isbn(self, isbn: str):
        return self.session.execute(select(Book).where(Book.isbn == isbn)).scalar_one_or_none()

    def add(self, book: Book):
        self.session.add(book)
        self.session.flush()
        return book

    def delete_unless_on_loan(self, isbn: str) -> int:
        """Match-and-delete in one statement; returns rows deleted."""
        stmt = (
            delete(Book)
            .where(Book.isbn == isbn, ~open_loans_of_book().exists())
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount

    def inventory_rows(self):
        """(book, open loan count) for every book, for audits."""
        return self.session.execute(select(Book, open_loan_count()).order_by(Book.id)).all()

    def link_author(self, book_id: int, author_id: int):
        self.session.execute(insert(BookAuthor).values(book_id=book_id, author_id=author_id))

    def link_category(self, book_id: int, category_id: int):
        self.session.execute(insert(BookCategory).values(book_id=book_id, category_id=category_id))
