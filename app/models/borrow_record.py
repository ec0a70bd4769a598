import math
from datetime import datetime, timedelta

from sqlalchemy.orm import validates

from app.extensions import db
from app.utils.identifiers import new_id, normalize_id


class BorrowRecord(db.Model):
    """One loan of one copy to one reader. Renewed and returned in place, never deleted."""
    __tablename__ = "borrow_records"
    __table_args__ = (
        db.Index("ix_borrow_records_user_book_returned", "user_id", "book_id", "returned"),
    )

    id = db.Column(db.String(64), primary_key=True, default=new_id)

    user_id = db.Column(db.String(64), nullable=False, index=True)
    book_id = db.Column(db.String(64), nullable=False, index=True)

    borrowed_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    due_date = db.Column(db.DateTime, nullable=False)

    renewed = db.Column(db.Boolean, nullable=False, default=False)
    renewed_at = db.Column(db.DateTime, nullable=True)
    renew_count = db.Column(db.Integer, nullable=False, default=0)

    returned = db.Column(db.Boolean, nullable=False, default=False)
    returned_at = db.Column(db.DateTime, nullable=True)

    # snapshot at borrow time so the row survives catalog/user deletion
    book_title = db.Column(db.String(200), nullable=False, default="")
    book_author = db.Column(db.String(200), nullable=False, default="")
    user_name = db.Column(db.String(120), nullable=False, default="")

    notes = db.Column(db.String(500), nullable=False, default="")

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    @validates("user_id", "book_id")
    def _normalize_ids(self, key, value):
        return normalize_id(value)

    @classmethod
    def open(cls, user_id, book_id, loan_days: int, book_title="", book_author="", user_name=""):
        now = datetime.utcnow()
        return cls(
            user_id=user_id,
            book_id=book_id,
            borrowed_at=now,
            due_date=now + timedelta(days=loan_days),
            renewed=False,
            renew_count=0,
            returned=False,
            book_title=book_title or "",
            book_author=book_author or "",
            user_name=user_name or "",
        )

    def renew(self, days: int = 30):
        # window restarts from the renewal moment, not from the old due date
        if self.returned:
            raise ValueError("Returned loan cannot be renewed")
        now = datetime.utcnow()
        self.renewed = True
        self.renewed_at = now
        self.renew_count = (self.renew_count or 0) + 1
        self.due_date = now + timedelta(days=days)
        return self

    def mark_returned(self, when=None):
        if self.returned:
            raise ValueError("Loan already returned")
        self.returned = True
        self.returned_at = when or datetime.utcnow()
        return self

    def is_overdue(self, now=None) -> bool:
        now = now or datetime.utcnow()
        return not self.returned and self.due_date < now

    def days_remaining(self, now=None) -> int:
        """Whole days until due (ceiling); negative once overdue, 0 once returned."""
        if self.returned:
            return 0
        now = now or datetime.utcnow()
        return math.ceil((self.due_date - now).total_seconds() / 86400)
