from sqlalchemy import func

from booklend.extensions import db
from booklend.utils.clock import utcnow


class Book(db.Model):
    __tablename__ = "books"

    id = db.Column(db.Integer, primary_key=True)
    isbn = db.Column(db.String(13), nullable=False)
    title = db.Column(db.String(200), nullable=False, index=True)
    publication_year = db.Column(db.SmallInteger, nullable=True)

    copies = db.Column(db.Integer, nullable=False, default=0)
    # set to copies on insert, afterwards only moved by StockGuard
    available = db.Column(db.Integer, nullable=False, default=0)

    publisher_id = db.Column(db.Integer, db.ForeignKey("publishers.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    last_modified = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    publisher = db.relationship("Publisher", backref="books")
    authors = db.relationship("Author", secondary="book_authors", viewonly=True, order_by="Author.id")
    categories = db.relationship("Category", secondary="book_categories", viewonly=True, order_by="Category.id")

    __table_args__ = (
        db.UniqueConstraint("isbn", name="uq_books_isbn"),
        db.CheckConstraint(func.char_length(isbn) == 13, name="ck_books_isbn_length"),
        db.CheckConstraint(func.char_length(title) <= 200, name="ck_books_title_length"),
        db.CheckConstraint("copies >= 0", name="ck_books_copies_nonneg"),
        db.CheckConstraint("available >= 0 AND available <= copies", name="ck_books_available_range"),
    )

    def __repr__(self):
        return f"<Book isbn={self.isbn} available={self.available}/{self.copies}>"


class BookAuthor(db.Model):
    __tablename__ = "book_authors"

    book_id = db.Column(db.Integer, db.ForeignKey("books.id", ondelete="CASCADE"), primary_key=True)
    author_id = db.Column(db.Integer, db.ForeignKey("authors.id", ondelete="CASCADE"), primary_key=True)


class BookCategory(db.Model):
    __tablename__ = "book_categories"

    book_id = db.Column(db.Integer, db.ForeignKey("books.id", ondelete="CASCADE"), primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True)
