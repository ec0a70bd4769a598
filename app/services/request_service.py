from flask import current_app

from app.extensions import db
from app.errors import DuplicatePending, NotFound, ValidationError
from app.models.borrow_request import BorrowRequest, TYPES, PENDING
from app.repositories.book_repo import BookRepo
from app.repositories.borrow_record_repo import BorrowRecordRepo
from app.repositories.borrow_request_repo import BorrowRequestRepo
from app.services.borrow_service import BorrowService
from app.utils.identifiers import normalize_id


class RequestService:
    @staticmethod
    def submit(identity, req_type, book_id, book_title=None, book_author=None):
        if req_type not in TYPES:
            raise ValidationError("type must be 'renew' or 'return'")
        if book_id is None or not str(book_id).strip():
            raise ValidationError("bookId is required")
        book_id = normalize_id(book_id)

        if BorrowRequestRepo.find_pending(identity.reader_id, book_id, req_type):
            raise DuplicatePending("You already have a pending request of this type for this book")

        # some clients send the loan id in bookId
        record = BorrowRecordRepo.find_active_by_id_for_user(book_id, identity.reader_id) \
            or BorrowRecordRepo.find_active_by_user_and_book(identity.reader_id, book_id)

        book = BookRepo.get(book_id)
        if book:
            title, author = book.title, book.author
        else:
            title = book_title or (record.book_title if record else "") or "Unknown book"
            author = book_author or (record.book_author if record else "") or ""

        try:
            req = BorrowRequestRepo.add(BorrowRequest(
                user_id=identity.reader_id,
                user_name=BorrowService.display_name(identity),
                book_id=book_id,
                book_title=title,
                book_author=author,
                record_id=record.id if record else None,
                type=req_type,
                status=PENDING,
            ))
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f"[RequestService] {req.type} request {req.id} submitted by {req.user_id}")
        return req

    @staticmethod
    def get(request_id):
        req = BorrowRequestRepo.get(request_id)
        if not req:
            raise NotFound("Request not found")
        return req

    @staticmethod
    def list_for_reader(reader_id):
        return BorrowRequestRepo.list_by_user(reader_id, limit=current_app.config["MY_REQUESTS_LIMIT"])

    @staticmethod
    def list_all():
        return BorrowRequestRepo.list_all()
