from booklend.models.review import Review


class ReviewRepo:
    def __init__(self, session):
        self.session = session

    def get(self, review_id: int):
        return self.session.get(Review, review_id)

    def add(self, review: Review):
        self.session.add(review)
        self.session.flush()
        return review
