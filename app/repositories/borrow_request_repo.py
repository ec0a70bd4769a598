from datetime import datetime

from sqlalchemy import update

from app.models.borrow_request import BorrowRequest, PENDING
from app.extensions import db
from app.utils.identifiers import match_id

class BorrowRequestRepo:
    @staticmethod
    def get(request_id):
        return BorrowRequest.query.filter(match_id(BorrowRequest.id, request_id)).first()

    @staticmethod
    def add(req: BorrowRequest):
        db.session.add(req)
        db.session.flush()
        return req

    @staticmethod
    def find_pending(user_id, book_id, req_type: str):
        return BorrowRequest.query.filter(
            BorrowRequest.type == req_type,
            BorrowRequest.status == PENDING,
            match_id(BorrowRequest.user_id, user_id),
            match_id(BorrowRequest.book_id, book_id),
        ).order_by(BorrowRequest.created_at.desc()).first()

    @staticmethod
    def list_by_user(user_id, limit: int = None):
        q = BorrowRequest.query.filter(match_id(BorrowRequest.user_id, user_id)) \
            .order_by(BorrowRequest.updated_at.desc(), BorrowRequest.created_at.desc())
        if limit:
            q = q.limit(limit)
        return q.all()

    @staticmethod
    def list_all():
        return BorrowRequest.query.order_by(BorrowRequest.created_at.desc()).all()

    @staticmethod
    def count_pending() -> int:
        return BorrowRequest.query.filter_by(status=PENDING).count()

    @staticmethod
    def transition(request_id: str, status: str, reason: str = None) -> bool:
        """
        Compare-and-swap out of `pending`. Returns False when another caller already
        moved the request, in which case nothing was written.
        """
        values = {"status": status, "handled_at": datetime.utcnow(), "updated_at": datetime.utcnow()}
        if reason is not None:
            values["reason"] = reason

        result = db.session.execute(
            update(BorrowRequest)
            .where(BorrowRequest.id == request_id, BorrowRequest.status == PENDING)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
