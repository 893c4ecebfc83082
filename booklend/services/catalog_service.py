import logging

from sqlalchemy.exc import IntegrityError

from booklend.errors import (
    BookOnLoan,
    ConcurrencyConflict,
    CopiesBelowOnLoan,
    NotFound,
    translate_integrity_error,
)
from booklend.models.author import Author
from booklend.models.book import Book
from booklend.models.category import Category
from booklend.models.publisher import Publisher
from booklend.repositories.book_repo import BookRepo
from booklend.services.stock_guard import StockGuard
from booklend.utils.clock import utcnow
from booklend.utils.validators import validate_copies, validate_ids, validate_isbn, validate_title

logger = logging.getLogger(__name__)


class CatalogService:
    """Book records and their copies/available counters."""

    def __init__(self, session):
        self.session = session
        self.books = BookRepo(session)
        self.stock = StockGuard(session)

    # -----------------------------
    # Reads
    # -----------------------------
    def list_books(self):
        return self.books.list_all()

    def get_book(self, book_id: int) -> Book:
        book = self.books.get(book_id)
        if book is None:
            raise NotFound("book", book_id)
        return book

    def find_book(self, isbn: str) -> Book:
        book = self.books.get_by_isbn(isbn)
        if book is None:
            raise NotFound("book", isbn)
        return book

    # -----------------------------
    # Writes
    # -----------------------------
    def add_book(self, book: Book, author_ids=(), category_ids=()) -> Book:
        """
        Validate, derive available from copies, then insert the book and its
        author/category links in one transaction.
        """
        validate_isbn(book.isbn)
        validate_title(book.title)
        book.copies = validate_copies(0 if book.copies is None else book.copies)
        author_ids = validate_ids("author_ids", author_ids)
        category_ids = validate_ids("category_ids", category_ids)

        book.available = book.copies
        now = utcnow()
        book.created_at = now
        book.last_modified = now

        try:
            if book.publisher_id is not None and self.session.get(Publisher, book.publisher_id) is None:
                raise NotFound("publisher", book.publisher_id)

            self.books.add(book)

            for author_id in author_ids:
                if self.session.get(Author, author_id) is None:
                    raise NotFound("author", author_id)
                self.books.link_author(book.id, author_id)
            for category_id in category_ids:
                if self.session.get(Category, category_id) is None:
                    raise NotFound("category", category_id)
                self.books.link_category(book.id, category_id)

            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise translate_integrity_error(e, isbn=book.isbn, copies=book.copies) from e
        except Exception:
            # nothing of a failed add may stay pending in the session
            self.session.rollback()
            raise

        logger.info(f"[catalog] book added isbn={book.isbn} copies={book.copies}")
        return book

    def remove_book(self, isbn: str) -> None:
        deleted = self.books.delete_unless_on_loan(isbn)
        if deleted:
            self.session.commit()
            logger.info(f"[catalog] book removed isbn={isbn}")
            return

        self.session.rollback()
        # nothing deleted: find out why
        if self.books.get_by_isbn(isbn) is None:
            raise NotFound("book", isbn)
        raise BookOnLoan(isbn)

    def update_book_copies(self, isbn: str, new_copies: int) -> Book:
        """
        Set copies and shift available by the same delta. Copies on loan are
        kept as they are, so shrinking below that number is refused.
        """
        validate_copies(new_copies)

        try:
            changed = self.stock.resize(isbn, new_copies)
        except IntegrityError as e:
            self.session.rollback()
            raise translate_integrity_error(e, isbn=isbn, copies=new_copies) from e

        if changed:
            self.session.commit()
            logger.info(f"[catalog] copies updated isbn={isbn} copies={new_copies}")
            return self.find_book(isbn)

        self.session.rollback()
        book = self.books.get_by_isbn(isbn)
        if book is None:
            raise NotFound("book", isbn)
        on_loan = book.copies - book.available
        if on_loan <= new_copies:
            # a return landed after the guarded update
            raise ConcurrencyConflict("book", isbn)
        raise CopiesBelowOnLoan(isbn, new_copies, on_loan)

    def reconcile_availability(self, isbn: str) -> Book:
        """Recompute available from the open loans of the book."""
        if not self.stock.reconcile(isbn):
            self.session.rollback()
            raise NotFound("book", isbn)
        self.session.commit()
        book = self.find_book(isbn)
        logger.info(f"[catalog] availability reconciled isbn={isbn} available={book.available}/{book.copies}")
        return book

    def link_author(self, isbn: str, author_id: int) -> Book:
        return self._link(isbn, Author, "author", author_id, self.books.link_author)

    def link_category(self, isbn: str, category_id: int) -> Book:
        return self._link(isbn, Category, "category", category_id, self.books.link_category)

    def _link(self, isbn, model, entity, target_id, link):
        book = self.find_book(isbn)
        try:
            if self.session.get(model, target_id) is None:
                raise NotFound(entity, target_id)
            link(book.id, target_id)
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise translate_integrity_error(e, **{f"{entity}_id": (book.id, target_id)}) from e
        except Exception:
            self.session.rollback()
            raise
        return book
