from dataclasses import dataclass, field
from typing import List, Optional

from flask import current_app

from app.extensions import db
from app.errors import AlreadyHandled, ValidationError
from app.models.borrow_record import BorrowRecord
from app.models.borrow_request import BorrowRequest
from app.repositories.borrow_record_repo import BorrowRecordRepo
from app.repositories.borrow_request_repo import BorrowRequestRepo
from app.services.borrow_service import BorrowService
from app.services.request_service import RequestService

DECISIONS = ("approve", "reject")


@dataclass
class Decision:
    request: BorrowRequest
    message: str
    record: Optional[BorrowRecord] = None
    warnings: List[str] = field(default_factory=list)


class ApprovalService:
    """
    Administrator decisions on renew/return requests.

    Each decision is one transaction: the request leaves `pending` through a
    compare-and-swap, and the loan, inventory and history changes commit with it
    or not at all. A request whose loan can no longer be found is closed as
    `invalid` instead of failing, so stale requests do not block the queue.
    """

    @staticmethod
    def _resolve_record(req: BorrowRequest):
        if req.record_id:
            record = BorrowRecordRepo.get(req.record_id)
            return record if record and not record.returned else None

        # rows without record_id: bookId may hold the loan id itself
        return BorrowRecordRepo.find_active_by_id_for_user(req.book_id, req.user_id) \
            or BorrowRecordRepo.find_active_by_user_and_book(req.user_id, req.book_id)

    @staticmethod
    def _claim(req: BorrowRequest, status: str, reason: str = None):
        if not BorrowRequestRepo.transition(req.id, status, reason):
            raise AlreadyHandled("This request has already been handled")

    @staticmethod
    def approve(request_id) -> Decision:
        req = RequestService.get(request_id)
        if not req.is_pending:
            raise AlreadyHandled("This request has already been handled")

        try:
            record = ApprovalService._resolve_record(req)

            if record is None:
                ApprovalService._claim(req, "invalid")
                db.session.commit()
                current_app.logger.warning(
                    f"[ApprovalService] request {req.id} marked invalid: no active loan for "
                    f"user={req.user_id} book={req.book_id}"
                )
                return Decision(req, "Request marked invalid: no matching active loan was found")

            ApprovalService._claim(req, "approved")

            warnings = []
            snapshot = {
                "book_title": req.book_title or record.book_title,
                "book_author": req.book_author or record.book_author,
                "user_name": req.user_name or record.user_name,
            }
            if req.type == "renew":
                BorrowService.renew_loan(record, warnings, **snapshot)
            else:
                BorrowService.close_loan(record, warnings, **snapshot)

            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f"[ApprovalService] {req.type} request {req.id} approved (record {record.id})")
        return Decision(req, "Request approved", record=record, warnings=warnings)

    @staticmethod
    def reject(request_id, reason) -> Decision:
        req = RequestService.get(request_id)
        if not req.is_pending:
            raise AlreadyHandled("This request has already been handled")

        if reason is not None and not isinstance(reason, str):
            raise ValidationError("reason must be a string")
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("A reason is required to reject a request")

        try:
            ApprovalService._claim(req, "rejected", reason)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f"[ApprovalService] request {req.id} rejected: {reason}")
        return Decision(req, "Request rejected")

    @staticmethod
    def decide(request_id, decision, reason=None) -> Decision:
        if decision not in DECISIONS:
            raise ValidationError("decision must be 'approve' or 'reject'")
        if decision == "approve":
            return ApprovalService.approve(request_id)
        return ApprovalService.reject(request_id, reason)
