from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from app.errors import LibraryError
from app.services.approval_service import ApprovalService
from app.services.request_service import RequestService
from app.utils.auth import current_identity, ADMINISTRATOR
from app.utils.decorators import role_required
from app.utils.serializers import request_json, record_json

request_bp = Blueprint("requests", __name__)


def _json_error(message, code=400):
    return jsonify({"success": False, "message": message}), code


def _decision_json(d):
    body = {
        "success": True,
        "message": d.message,
        "request": request_json(d.request),
        "warnings": d.warnings,
    }
    if d.record is not None:
        body["record"] = record_json(d.record)
    return jsonify(body)


@request_bp.post("/")
@jwt_required()
def submit_request():
    data = request.get_json(silent=True) or {}
    try:
        req = RequestService.submit(
            current_identity(),
            data.get("type"),
            data.get("bookId"),
            book_title=data.get("bookTitle"),
            book_author=data.get("bookAuthor"),
        )
        return jsonify({
            "success": True,
            "message": "Request submitted, waiting for administrator review",
            "request": request_json(req),
        }), 201
    except LibraryError as e:
        return _json_error(str(e), e.status_code)


@request_bp.get("/mine")
@jwt_required()
def my_requests():
    reqs = RequestService.list_for_reader(current_identity().reader_id)
    return jsonify({"success": True, "data": [request_json(q) for q in reqs]})


@request_bp.get("/admin")
@jwt_required()
@role_required(ADMINISTRATOR)
def all_requests():
    return jsonify({"success": True, "data": [request_json(q) for q in RequestService.list_all()]})


@request_bp.post("/<request_id>/approve")
@jwt_required()
@role_required(ADMINISTRATOR)
def approve_request(request_id):
    try:
        return _decision_json(ApprovalService.approve(request_id))
    except LibraryError as e:
        return _json_error(str(e), e.status_code)


@request_bp.post("/<request_id>/reject")
@jwt_required()
@role_required(ADMINISTRATOR)
def reject_request(request_id):
    data = request.get_json(silent=True) or {}
    try:
        return _decision_json(ApprovalService.reject(request_id, data.get("reason")))
    except LibraryError as e:
        return _json_error(str(e), e.status_code)


@request_bp.post("/<request_id>/decide")
@jwt_required()
@role_required(ADMINISTRATOR)
def decide_request(request_id):
    data = request.get_json(silent=True) or {}
    try:
        return _decision_json(ApprovalService.decide(request_id, data.get("decision"), data.get("reason")))
    except LibraryError as e:
        return _json_error(str(e), e.status_code)
