from app.models.borrow_history import BorrowHistory
from app.extensions import db
from app.utils.identifiers import match_id

class BorrowHistoryRepo:
    @staticmethod
    def add(entry: BorrowHistory):
        db.session.add(entry)
        db.session.flush()
        return entry

    @staticmethod
    def _newest_first(query):
        return query.order_by(BorrowHistory.created_at.desc(), BorrowHistory.borrow_date.desc())

    @staticmethod
    def list_by_user(user_id):
        return BorrowHistoryRepo._newest_first(
            BorrowHistory.query.filter(match_id(BorrowHistory.user_id, user_id))
        ).all()

    @staticmethod
    def list_by_book(book_id):
        return BorrowHistoryRepo._newest_first(
            BorrowHistory.query.filter(match_id(BorrowHistory.book_id, book_id))
        ).all()

    @staticmethod
    def list_by_user_and_book(user_id, book_id):
        return BorrowHistoryRepo._newest_first(
            BorrowHistory.query.filter(
                match_id(BorrowHistory.user_id, user_id),
                match_id(BorrowHistory.book_id, book_id),
            )
        ).all()

    @staticmethod
    def list_all():
        return BorrowHistoryRepo._newest_first(BorrowHistory.query).all()

    @staticmethod
    def list_returns():
        return BorrowHistory.query.filter_by(action="return").all()
