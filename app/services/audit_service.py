
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.models.borrow_history import BorrowHistory
from app.repositories.borrow_history_repo import BorrowHistoryRepo


class AuditService:
    @staticmethod
    def append(action: str, record, warnings: list = None, **overrides):
        """
        Append one history entry for `record` inside a SAVEPOINT of the caller's transaction.

        The loan mutation is authoritative: if the append fails only the savepoint is rolled
        back, the failure is logged and a message is added to `warnings`. Returns the entry or None.
        """
        fields = {
            "user_id": record.user_id,
            "book_id": record.book_id,
            "book_title": record.book_title or "",
            "book_author": record.book_author or "",
            "user_name": record.user_name or "",
            "action": action,
            "borrow_date": record.borrowed_at,
            "due_date": record.due_date,
            "is_renewed": bool(record.renewed),
            "renew_count": record.renew_count or 0,
        }
        fields.update({k: v for k, v in overrides.items() if v is not None})

        try:
            with db.session.begin_nested():
                return BorrowHistoryRepo.add(BorrowHistory(**fields))
        except SQLAlchemyError as e:
            current_app.logger.warning(
                f"[AuditService] {action} history not written for record {record.id}: {e}"
            )
            if warnings is not None:
                warnings.append(f"History entry for '{action}' could not be written")
            return None
