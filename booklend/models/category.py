from booklend.extensions import db


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)

    __table_args__ = (
        db.UniqueConstraint("name", name="uq_categories_name"),
    )
