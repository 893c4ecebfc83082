from booklend.extensions import db


class Author(db.Model):
    __tablename__ = "authors"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    biography = db.Column(db.Text, nullable=True)
    birth_year = db.Column(db.SmallInteger, nullable=True)
