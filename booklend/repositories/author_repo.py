from sqlalchemy import select

from booklend.models.author import Author


class AuthorRepo:
    def __init__(self, session):
        self.session = session

    def list_all(self):
        return self.session.execute(select(Author).order_by(Author.id.desc())).scalars().all()

    def get(self, author_id: int):
        return self.session.get(Author, author_id)

    def add(self, author: Author):
        self.session.add(author)
        self.session.flush()
        return author
