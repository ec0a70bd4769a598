from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required

from app.errors import LibraryError
from app.repositories.borrow_history_repo import BorrowHistoryRepo
from app.repositories.borrow_record_repo import BorrowRecordRepo
from app.services.borrow_service import BorrowService
from app.utils.auth import current_identity, ADMINISTRATOR
from app.utils.decorators import role_required
from app.utils.serializers import record_json, history_json

borrow_bp = Blueprint("borrow", __name__)


def _json_error(message, code=400):
    return jsonify({"success": False, "message": message}), code


@borrow_bp.post("/borrow/<book_id>")
@jwt_required()
def borrow_book(book_id):
    try:
        record, warnings = BorrowService.borrow_book(current_identity(), book_id)
        return jsonify({
            "success": True,
            "message": "Book borrowed",
            "record": record_json(record),
            "warnings": warnings,
        }), 201
    except LibraryError as e:
        return _json_error(str(e), e.status_code)


@borrow_bp.get("/borrowed")
@jwt_required()
def my_active_loans():
    records = BorrowService.list_active_loans(current_identity().reader_id)
    return jsonify({"success": True, "data": [record_json(r) for r in records]})


@borrow_bp.get("/history")
@jwt_required()
def my_history():
    history = BorrowService.list_history(current_identity().reader_id)
    return jsonify({"success": True, "data": [history_json(h) for h in history]})


@borrow_bp.get("/records/active")
@jwt_required()
@role_required(ADMINISTRATOR)
def all_active_loans():
    return jsonify({"success": True, "data": [record_json(r) for r in BorrowRecordRepo.list_active()]})


@borrow_bp.get("/records")
@jwt_required()
@role_required(ADMINISTRATOR)
def all_loans():
    return jsonify({"success": True, "data": [record_json(r) for r in BorrowRecordRepo.list_all()]})


@borrow_bp.get("/history/all")
@jwt_required()
@role_required(ADMINISTRATOR)
def all_history():
    return jsonify({"success": True, "data": [history_json(h) for h in BorrowHistoryRepo.list_all()]})


@borrow_bp.post("/return")
@jwt_required()
@role_required(ADMINISTRATOR)
def mark_returned():
    data = request.get_json(silent=True) or {}
    try:
        record, warnings = BorrowService.mark_returned(
            record_id=data.get("borrowRecordId"),
            user_id=data.get("userId"),
            book_id=data.get("bookId"),
        )
        return jsonify({
            "success": True,
            "message": "Book returned",
            "record": record_json(record),
            "warnings": warnings,
        })
    except LibraryError as e:
        return _json_error(str(e), e.status_code)


@borrow_bp.get("/stats")
@jwt_required()
@role_required(ADMINISTRATOR)
def stats():
    try:
        return jsonify({"success": True, "data": BorrowService.stats()})
    except Exception as e:
        current_app.logger.exception(f"[borrow_controller] stats failed: {e}")
        return _json_error("Could not compute statistics", 500)
