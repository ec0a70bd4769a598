from datetime import datetime

from sqlalchemy import event
from sqlalchemy.orm import validates

from app.extensions import db
from app.utils.identifiers import new_id, normalize_id

TYPES = ("renew", "return")
STATUSES = ("pending", "approved", "rejected", "invalid")
PENDING = "pending"


class BorrowRequest(db.Model):
    """Reader's renew/return request, decided once by an administrator."""
    __tablename__ = "borrow_requests"
    __table_args__ = (
        db.Index("ix_borrow_requests_status_type", "status", "type"),
        db.Index("ix_borrow_requests_user_book_type_status", "user_id", "book_id", "type", "status"),
    )

    id = db.Column(db.String(64), primary_key=True, default=new_id)

    user_id = db.Column(db.String(64), nullable=False, index=True)
    user_name = db.Column(db.String(120), nullable=False, default="")

    book_id = db.Column(db.String(64), nullable=False, index=True)
    book_title = db.Column(db.String(200), nullable=False, default="")
    book_author = db.Column(db.String(200), nullable=False, default="")

    # loan this request targets; NULL on rows submitted before it was captured
    record_id = db.Column(db.String(64), nullable=True, index=True)

    type = db.Column(db.String(10), nullable=False)  # renew/return
    status = db.Column(db.String(10), nullable=False, default=PENDING, index=True)

    reason = db.Column(db.String(500), nullable=False, default="")
    handled_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    @validates("user_id", "book_id")
    def _normalize_ids(self, key, value):
        return normalize_id(value)

    @validates("record_id")
    def _normalize_record_id(self, key, value):
        return normalize_id(value) if value is not None else None

    @property
    def is_pending(self) -> bool:
        return self.status == PENDING


@event.listens_for(BorrowRequest.status, "set")
def _stamp_handled_at(target, value, oldvalue, initiator):
    if value != PENDING and value != oldvalue:
        target.handled_at = datetime.utcnow()
