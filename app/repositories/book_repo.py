from sqlalchemy import update

from app.models.book import Book
from app.extensions import db
from app.utils.identifiers import match_id

class BookRepo:
    @staticmethod
    def get(book_id: str):
        return Book.query.filter(match_id(Book.id, book_id)).first()

    @staticmethod
    def count_all() -> int:
        return Book.query.count()

    @staticmethod
    def decrement_copies(book_id: str) -> bool:
        """copies -= 1, borrow_count += 1 in one statement, only while copies > 0."""
        result = db.session.execute(
            update(Book)
            .where(match_id(Book.id, book_id), Book.copies > 0)
            .values(copies=Book.copies - 1, borrow_count=Book.borrow_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def increment_copies(book_id: str) -> bool:
        result = db.session.execute(
            update(Book)
            .where(match_id(Book.id, book_id))
            .values(copies=Book.copies + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
