from datetime import datetime, timedelta

from flask import current_app

from app.extensions import db
from app.errors import NotFound, OutOfStock, QuotaExceeded, AlreadyBorrowed, ValidationError
from app.models.borrow_record import BorrowRecord
from app.repositories.book_repo import BookRepo
from app.repositories.borrow_record_repo import BorrowRecordRepo
from app.repositories.borrow_history_repo import BorrowHistoryRepo
from app.repositories.borrow_request_repo import BorrowRequestRepo
from app.repositories.user_repo import UserRepo
from app.services.audit_service import AuditService
from app.services.inventory_service import InventoryService
from app.utils.identifiers import normalize_id


class BorrowService:
    @staticmethod
    def display_name(identity) -> str:
        if identity.name:
            return identity.name
        user = UserRepo.get_by_id(identity.reader_id)
        return user.name if user else ""

    @staticmethod
    def borrow_book(identity, book_id):
        """
        Open a loan of `book_id` for the current reader.
        Returns (record, warnings); warnings is non-empty only when the history append failed.
        """
        cfg = current_app.config
        book_id = normalize_id(book_id)

        try:
            book = BookRepo.get(book_id)
            if not book:
                raise NotFound("Book not found")
            if not book.is_available():
                raise OutOfStock("No copies of this book are available")

            since = datetime.utcnow() - timedelta(days=cfg["BORROW_QUOTA_WINDOW_DAYS"])
            opened = BorrowRecordRepo.count_opened_since(identity.reader_id, since)
            if opened >= cfg["BORROW_QUOTA"]:
                raise QuotaExceeded(
                    f"Borrowing limit reached: {cfg['BORROW_QUOTA']} books per "
                    f"{cfg['BORROW_QUOTA_WINDOW_DAYS']} days"
                )

            if BorrowRecordRepo.find_active_by_user_and_book(identity.reader_id, book_id):
                raise AlreadyBorrowed("You already have this book on loan")

            # conditional UPDATE; a concurrent borrow of the last copy ends up here as OutOfStock
            InventoryService.decrement_on_borrow(book_id)

            record = BorrowRecordRepo.add(BorrowRecord.open(
                identity.reader_id,
                book_id,
                cfg["LOAN_DAYS"],
                book_title=book.title,
                book_author=book.author,
                user_name=BorrowService.display_name(identity),
            ))

            warnings = []
            AuditService.append("borrow", record, warnings, renew_count=0)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f"[BorrowService] {record.user_id} borrowed {record.book_id} (record {record.id})")
        return record, warnings

    @staticmethod
    def renew_loan(record: BorrowRecord, warnings: list, **audit_fields):
        """Renew in the caller's transaction and append the `renew` entry."""
        record.renew(current_app.config["RENEW_DAYS"])
        db.session.flush()
        AuditService.append(
            "renew", record, warnings,
            is_renewed=True,
            renew_count=record.renew_count,
            **audit_fields,
        )
        return record

    @staticmethod
    def close_loan(record: BorrowRecord, warnings: list, **audit_fields):
        """
        Return in the caller's transaction: close the record, put the copy back,
        track lateness on the reader and append the `return` entry.
        """
        now = datetime.utcnow()
        was_overdue = record.is_overdue(now)

        record.mark_returned(now)
        db.session.flush()
        InventoryService.increment_on_return(record.book_id)

        if was_overdue:
            BorrowService._track_overdue(record.user_id)

        AuditService.append(
            "return", record, warnings,
            return_date=now,
            is_renewed=bool(record.renewed),
            renew_count=record.renew_count,
            **audit_fields,
        )
        return record

    @staticmethod
    def _track_overdue(user_id):
        user = UserRepo.get_by_id(user_id)
        if not user:
            return

        user.overdue_count = (user.overdue_count or 0) + 1
        threshold = current_app.config["OVERDUE_BLACKLIST_THRESHOLD"]
        if user.overdue_count > threshold and not user.is_blacklisted:
            user.is_blacklisted = True
            user.blacklist_reason = f"Automatically blacklisted: more than {threshold} overdue returns"
            current_app.logger.warning(
                f"[BorrowService] reader {user.id} blacklisted after {user.overdue_count} overdue returns"
            )

    @staticmethod
    def mark_returned(record_id=None, user_id=None, book_id=None):
        """Administrator return without a request, by record id or by (reader, book)."""
        if record_id:
            record = BorrowRecordRepo.get(record_id)
        elif user_id and book_id:
            record = BorrowRecordRepo.find_active_by_id_for_user(book_id, user_id) \
                or BorrowRecordRepo.find_active_by_user_and_book(user_id, book_id)
        else:
            raise ValidationError("borrowRecordId or userId + bookId is required")

        if not record:
            raise NotFound("No active loan found")
        if record.returned:
            raise ValidationError("This loan has already been returned")

        try:
            warnings = []
            BorrowService.close_loan(record, warnings)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f"[BorrowService] record {record.id} returned by administrator")
        return record, warnings

    @staticmethod
    def list_active_loans(reader_id):
        return BorrowRecordRepo.list_active_by_user(reader_id)

    @staticmethod
    def list_history(reader_id):
        return BorrowHistoryRepo.list_by_user(reader_id)

    @staticmethod
    def stats():
        now = datetime.utcnow()
        returns = BorrowHistoryRepo.list_returns()
        on_time = [
            h for h in returns
            if h.return_date and h.due_date and h.return_date <= h.due_date
        ]
        return {
            "totalBooks": BookRepo.count_all(),
            "totalBorrowed": BorrowRecordRepo.count_active(),
            "pendingRequests": BorrowRequestRepo.count_pending(),
            "overdueBooks": BorrowRecordRepo.count_overdue(now),
            "activeReaders": UserRepo.count_readers(),
            "onTimeRate": round(len(on_time) / len(returns) * 100) if returns else 0,
        }
