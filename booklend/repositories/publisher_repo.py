from sqlalchemy import select

from booklend.models.publisher import Publisher


class PublisherRepo:
    def __init__(self, session):
        self.session = session

    def list_all(self):
        return self.session.execute(select(Publisher).order_by(Publisher.id.desc())).scalars().all()

    def get(self, publisher_id: int):
        return self.session.get(Publisher, publisher_id)

    def add(self, publisher: Publisher):
        self.session.add(publisher)
        self.session.flush()
        return publisher
