from datetime import datetime

from sqlalchemy import event
from sqlalchemy.orm import validates

from app.extensions import db
from app.utils.identifiers import new_id, normalize_id

ACTIONS = ("borrow", "renew", "return")


class BorrowHistory(db.Model):
    __tablename__ = "borrow_history"
    __table_args__ = (
        db.Index("ix_borrow_history_user_book", "user_id", "book_id"),
        db.Index("ix_borrow_history_user_action", "user_id", "action"),
    )

    id = db.Column(db.String(64), primary_key=True, default=new_id)

    user_id = db.Column(db.String(64), nullable=False, index=True)
    book_id = db.Column(db.String(64), nullable=False, index=True)

    book_title = db.Column(db.String(200), nullable=False, default="")
    book_author = db.Column(db.String(200), nullable=False, default="")
    user_name = db.Column(db.String(120), nullable=False, default="")

    action = db.Column(db.String(10), nullable=False, index=True)  # borrow/renew/return

    borrow_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    due_date = db.Column(db.DateTime, nullable=True)
    return_date = db.Column(db.DateTime, nullable=True)

    is_renewed = db.Column(db.Boolean, nullable=False, default=False)
    renew_count = db.Column(db.Integer, nullable=False, default=0)

    notes = db.Column(db.String(500), nullable=False, default="")

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    @validates("user_id", "book_id")
    def _normalize_ids(self, key, value):
        return normalize_id(value)

    @validates("action")
    def _check_action(self, key, value):
        if value not in ACTIONS:
            raise ValueError(f"Unknown history action: {value}")
        return value


@event.listens_for(BorrowHistory, "before_update")
def _history_is_append_only(mapper, connection, target):
    raise RuntimeError("BorrowHistory entries are immutable")
