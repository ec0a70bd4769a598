import pytest
from flask_jwt_extended import create_access_token

from app import create_app
from app.config import TestConfig
from app.extensions import db
from app.models.book import Book
from app.models.user import User
from app.utils.auth import Identity, READER, ADMINISTRATOR


@pytest.fixture
def app(tmp_path):
    # unique sqlite file per test
    config = type("PerTestConfig", (TestConfig,), {
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'library.db'}",
    })
    app = create_app(config)
    with app.app_context():
        db.create_all()
        db.session.add_all([
            User(id="r10001", name="Alice", role=READER),
            User(id="r10002", name="Bob", role=READER),
            User(id="a00001", name="Admin", role=ADMINISTRATOR),
        ])
        db.session.commit()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _headers(reader_id, role, name):
    token = create_access_token(identity=reader_id, additional_claims={"role": role, "name": name})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def reader_headers(app):
    return _headers("r10001", READER, "Alice")


@pytest.fixture
def other_reader_headers(app):
    return _headers("r10002", READER, "Bob")


@pytest.fixture
def admin_headers(app):
    return _headers("a00001", ADMINISTRATOR, "Admin")


@pytest.fixture
def reader():
    return Identity(reader_id="r10001", role=READER, name="Alice")


@pytest.fixture
def make_book(app):
    def _make(title="Dune", author="Frank Herbert", copies=2, total_copies=None, category="Fiction"):
        book = Book(
            title=title,
            author=author,
            category=category,
            copies=copies,
            total_copies=copies if total_copies is None else total_copies,
        )
        db.session.add(book)
        db.session.commit()
        return book
    return _make


@pytest.fixture
def book(make_book):
    return make_book()
