import pytest

from booklend import create_app
from booklend.config import TestConfig
from booklend.extensions import db
from booklend.models.book import Book
from booklend.services.catalog_service import CatalogService
from booklend.services.loan_service import LoanService
from booklend.services.reference_service import ReferenceService



@pytest.fixture
def app(tmp_path):
    # file database so worker threads share it
    class _Config(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'booklend_test.db'}"

    app = create_app(_Config)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def catalog(app):
    return CatalogService(db.session)


@pytest.fixture
def ledger(app):
    return LoanService(db.session)


@pytest.fixture
def reference(app):
    return ReferenceService(db.session)


@pytest.fixture
def publisher_id(reference):
    return reference.create_publisher("Test Publisher", "123 Test St").id


@pytest.fixture
def make_book(catalog):
    """Add a book through the catalog; isbn defaults to a unique 13-char value."""
    counter = {"n": 0}

    def _make(isbn=None, title="Clean Code", copies=1, **kwargs):
        counter["n"] += 1
        isbn = isbn or f"978{counter['n']:010d}"
        return catalog.add_book(Book(isbn=isbn, title=title, copies=copies, **kwargs))

    return _make
