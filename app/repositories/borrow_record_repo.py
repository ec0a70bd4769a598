from datetime import datetime

from app.models.borrow_record import BorrowRecord
from app.extensions import db
from app.utils.identifiers import match_id

class BorrowRecordRepo:
    @staticmethod
    def get(record_id):
        return BorrowRecord.query.filter(match_id(BorrowRecord.id, record_id)).first()

    @staticmethod
    def add(record: BorrowRecord):
        db.session.add(record)
        db.session.flush()
        return record

    @staticmethod
    def find_active_by_user_and_book(user_id, book_id):
        # newest first in case the one-active-loan rule was ever broken
        return BorrowRecord.query.filter(
            match_id(BorrowRecord.user_id, user_id),
            match_id(BorrowRecord.book_id, book_id),
            BorrowRecord.returned.is_(False),
        ).order_by(BorrowRecord.borrowed_at.desc()).first()

    @staticmethod
    def find_active_by_id_for_user(record_id, user_id):
        return BorrowRecord.query.filter(
            match_id(BorrowRecord.id, record_id),
            match_id(BorrowRecord.user_id, user_id),
            BorrowRecord.returned.is_(False),
        ).first()

    @staticmethod
    def count_opened_since(user_id, since: datetime) -> int:
        return BorrowRecord.query.filter(
            match_id(BorrowRecord.user_id, user_id),
            BorrowRecord.borrowed_at >= since,
        ).count()

    @staticmethod
    def list_active_by_user(user_id):
        return BorrowRecord.query.filter(
            match_id(BorrowRecord.user_id, user_id),
            BorrowRecord.returned.is_(False),
        ).order_by(BorrowRecord.borrowed_at.desc()).all()

    @staticmethod
    def list_active():
        return BorrowRecord.query.filter(BorrowRecord.returned.is_(False)) \
            .order_by(BorrowRecord.due_date.asc()).all()

    @staticmethod
    def list_all():
        return BorrowRecord.query.order_by(BorrowRecord.borrowed_at.desc()).all()

    @staticmethod
    def count_active_for_book(book_id) -> int:
        return BorrowRecord.query.filter(
            match_id(BorrowRecord.book_id, book_id),
            BorrowRecord.returned.is_(False),
        ).count()

    @staticmethod
    def count_active() -> int:
        return BorrowRecord.query.filter(BorrowRecord.returned.is_(False)).count()

    @staticmethod
    def count_overdue(now: datetime) -> int:
        return BorrowRecord.query.filter(
            BorrowRecord.returned.is_(False),
            BorrowRecord.due_date < now,
        ).count()
