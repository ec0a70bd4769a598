import uuid
from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.errors import QuotaExceeded, AlreadyBorrowed
from app.extensions import db
from app.models.book import Book
from app.models.borrow_history import BorrowHistory
from app.models.borrow_record import BorrowRecord
from app.repositories.borrow_history_repo import BorrowHistoryRepo
from app.services.approval_service import ApprovalService
from app.services.borrow_service import BorrowService
from app.services.request_service import RequestService


def test_borrow_opens_loan_and_logs_history(client, reader_headers, book):
    r = client.post(f"/library/borrow/{book.id}", headers=reader_headers)
    assert r.status_code == 201
    body = r.get_json()
    assert body["success"] is True
    assert body["warnings"] == []

    rec = body["record"]
    assert rec["userId"] == "r10001"
    assert rec["bookId"] == book.id
    assert rec["title"] == "Dune"
    assert rec["userName"] == "Alice"
    assert rec["returned"] is False
    assert rec["daysRemaining"] == 30

    assert book.copies == 1
    assert book.borrow_count == 1

    history = BorrowHistory.query.all()
    assert len(history) == 1
    assert history[0].action == "borrow"
    assert history[0].renew_count == 0
    assert history[0].book_title == "Dune"


def test_borrow_requires_token(client, book):
    r = client.post(f"/library/borrow/{book.id}")
    assert r.status_code == 401


def test_borrow_unknown_book(client, reader_headers):
    r = client.post("/library/borrow/nope", headers=reader_headers)
    assert r.status_code == 404
    assert r.get_json()["success"] is False


def test_borrow_out_of_stock(client, reader_headers, make_book):
    book = make_book(copies=0, total_copies=3)
    r = client.post(f"/library/borrow/{book.id}", headers=reader_headers)
    assert r.status_code == 400
    assert BorrowRecord.query.count() == 0
    assert BorrowHistory.query.count() == 0


def test_one_active_loan_per_reader_and_book(app, reader, book):
    BorrowService.borrow_book(reader, book.id)

    with pytest.raises(AlreadyBorrowed):
        BorrowService.borrow_book(reader, book.id)

    assert book.copies == 1
    assert BorrowRecord.query.filter_by(returned=False).count() == 1


def test_quota_five_loans_per_thirty_days(app, reader, make_book):
    books = [make_book(title=f"Book {i}") for i in range(7)]
    for b in books[:5]:
        BorrowService.borrow_book(reader, b.id)

    with pytest.raises(QuotaExceeded):
        BorrowService.borrow_book(reader, books[5].id)
    assert books[5].copies == 2

    # loans opened outside the window no longer count
    for r in BorrowRecord.query.all():
        r.borrowed_at = datetime.utcnow() - timedelta(days=31)
    db.session.commit()

    record, _ = BorrowService.borrow_book(reader, books[5].id)
    assert record.book_id == books[5].id


def test_quota_is_per_reader(client, reader_headers, other_reader_headers, make_book):
    books = [make_book(title=f"Book {i}") for i in range(6)]
    for b in books[:5]:
        assert client.post(f"/library/borrow/{b.id}", headers=reader_headers).status_code == 201

    r = client.post(f"/library/borrow/{books[5].id}", headers=reader_headers)
    assert r.status_code == 400
    assert "limit" in r.get_json()["message"]

    r = client.post(f"/library/borrow/{books[5].id}", headers=other_reader_headers)
    assert r.status_code == 201


def test_history_failure_does_not_undo_borrow(app, reader, book, monkeypatch):
    def boom(entry):
        raise SQLAlchemyError("history table unavailable")
    monkeypatch.setattr(BorrowHistoryRepo, "add", boom)

    record, warnings = BorrowService.borrow_book(reader, book.id)

    assert warnings
    assert BorrowRecord.query.filter_by(id=record.id).count() == 1
    assert book.copies == 1
    assert BorrowHistory.query.count() == 0


def test_active_loans_and_history_views(client, reader_headers, other_reader_headers, make_book):
    a, b = make_book(title="A"), make_book(title="B")
    client.post(f"/library/borrow/{a.id}", headers=reader_headers)
    client.post(f"/library/borrow/{b.id}", headers=other_reader_headers)

    r = client.get("/library/borrowed", headers=reader_headers)
    data = r.get_json()["data"]
    assert [x["title"] for x in data] == ["A"]
    assert data[0]["overdue"] is False

    r = client.get("/library/history", headers=reader_headers)
    data = r.get_json()["data"]
    assert len(data) == 1
    assert data[0]["action"] == "borrow"
    assert data[0]["title"] == "A"


def test_catalog_row_with_hyphenated_id(app, reader):
    legacy_id = str(uuid.uuid4())
    db.session.add(Book(id=legacy_id, title="Solaris", author="Stanislaw Lem", copies=1, total_copies=1))
    db.session.commit()

    record, _ = BorrowService.borrow_book(reader, legacy_id)
    assert record.book_id == uuid.UUID(legacy_id).hex
    assert record.book_title == "Solaris"
    book = db.session.get(Book, legacy_id)
    assert book.copies == 0

    req = RequestService.submit(reader, "return", uuid.UUID(legacy_id).hex)
    assert req.book_title == "Solaris"

    decision = ApprovalService.approve(req.id)
    assert decision.request.status == "approved"
    assert decision.record.returned is True
    assert db.session.get(Book, legacy_id).copies == 1
