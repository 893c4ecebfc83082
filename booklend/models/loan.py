import enum

from booklend.extensions import db


class LoanStatus(str, enum.Enum):
    ACTIVE = "active"
    RETURNED = "returned"


class BookLoan(db.Model):
    __tablename__ = "book_loans"

    id = db.Column(db.Integer, primary_key=True)

    book_id = db.Column(db.Integer, db.ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)

    loan_date = db.Column(db.DateTime, nullable=False)
    due_date = db.Column(db.DateTime, nullable=False)
    returned = db.Column(db.Boolean, nullable=False, default=False, index=True)
    return_date = db.Column(db.DateTime, nullable=True)

    book = db.relationship("Book", backref=db.backref("loans", passive_deletes=True))

    __table_args__ = (
        db.CheckConstraint("due_date >= loan_date", name="ck_book_loans_period"),
    )

    @property
    def status(self) -> LoanStatus:
        return LoanStatus.RETURNED if self.returned else LoanStatus.ACTIVE

    def __repr__(self):
        return f"<BookLoan id={self.id} book_id={self.book_id} status={self.status.value}>"
