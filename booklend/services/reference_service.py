import logging

from sqlalchemy.exc import IntegrityError

from booklend.errors import NotFound, translate_integrity_error
from booklend.models.author import Author
from booklend.models.category import Category
from booklend.models.publisher import Publisher
from booklend.models.review import Review
from booklend.repositories.author_repo import AuthorRepo
from booklend.repositories.category_repo import CategoryRepo
from booklend.repositories.publisher_repo import PublisherRepo
from booklend.repositories.review_repo import ReviewRepo
from booklend.utils.validators import validate_name, validate_rating

logger = logging.getLogger(__name__)


class ReferenceService:
    """Authors, publishers, categories and reviews: create and read only."""

    def __init__(self, session):
        self.session = session
        self.authors = AuthorRepo(session)
        self.publishers = PublisherRepo(session)
        self.categories = CategoryRepo(session)
        self.reviews = ReviewRepo(session)

    def _save(self, repo, row, **context):
        try:
            repo.add(row)
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise translate_integrity_error(e, **context) from e
        return row

    @staticmethod
    def _found(row, entity: str, key):
        if row is None:
            raise NotFound(entity, key)
        return row

    # Authors
    def create_author(self, name: str, biography: str | None = None, birth_year: int | None = None) -> Author:
        author = Author(name=validate_name("name", name), biography=biography, birth_year=birth_year)
        return self._save(self.authors, author)

    def get_author(self, author_id: int) -> Author:
        return self._found(self.authors.get(author_id), "author", author_id)

    def list_authors(self):
        return self.authors.list_all()

    # Publishers
    def create_publisher(self, name: str, address: str | None = None) -> Publisher:
        publisher = Publisher(name=validate_name("name", name), address=address)
        return self._save(self.publishers, publisher)

    def get_publisher(self, publisher_id: int) -> Publisher:
        return self._found(self.publishers.get(publisher_id), "publisher", publisher_id)

    def list_publishers(self):
        return self.publishers.list_all()

    # Categories
    def create_category(self, name: str) -> Category:
        name = validate_name("name", name, max_length=100)
        category = self._save(self.categories, Category(name=name), name=name)
        logger.info(f"[reference] category created name={name}")
        return category

    def get_category(self, category_id: int) -> Category:
        return self._found(self.categories.get(category_id), "category", category_id)

    def list_categories(self):
        return self.categories.list_all()

    # Reviews
    def create_review(self, rating: int, comment: str | None = None,
                      customer_id: int | None = None, product_id: int | None = None) -> Review:
        review = Review(
            rating=validate_rating(rating),
            comment=comment,
            customer_id=customer_id,
            product_id=product_id,
        )
        return self._save(self.reviews, review, rating=rating)

    def get_review(self, review_id: int) -> Review:
        return self._found(self.reviews.get(review_id), "review", review_id)
