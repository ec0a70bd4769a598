import uuid

from sqlalchemy import update

from app.extensions import db
from app.models.book import Book
from app.models.borrow_history import BorrowHistory
from app.models.borrow_record import BorrowRecord
from app.models.borrow_request import BorrowRequest
from app.services.borrow_service import BorrowService
from app.services.request_service import RequestService


def _hyphenate(model, row_id, **columns):
    db.session.execute(
        update(model.__table__)
        .where(model.__table__.c.id == row_id)
        .values(**{k: str(uuid.UUID(v)) for k, v in columns.items()})
    )
    db.session.commit()


def test_cli_rewrites_legacy_spellings(app, reader, book):
    record, _ = BorrowService.borrow_book(reader, book.id)
    req = RequestService.submit(reader, "renew", book.id)
    entry = BorrowHistory.query.one()
    record_id, req_id, entry_id = record.id, req.id, entry.id

    _hyphenate(BorrowRecord, record_id, book_id=book.id)
    _hyphenate(BorrowRequest, req_id, book_id=book.id, record_id=record_id)
    _hyphenate(BorrowHistory, entry_id, book_id=book.id)

    result = app.test_cli_runner().invoke(args=["ids", "normalize"])

    assert result.exit_code == 0
    assert "borrow_records: 1 row(s) updated" in result.output
    assert "borrow_requests: 1 row(s) updated" in result.output
    assert "borrow_history: 1 row(s) updated" in result.output

    db.session.expire_all()
    assert db.session.get(BorrowRecord, record_id).book_id == book.id
    req = db.session.get(BorrowRequest, req_id)
    assert req.book_id == book.id
    assert req.record_id == record_id
    assert db.session.get(BorrowHistory, entry_id).book_id == book.id


def test_cli_is_a_no_op_on_canonical_data(app, reader, book):
    BorrowService.borrow_book(reader, book.id)

    result = app.test_cli_runner().invoke(args=["ids", "normalize"])

    assert result.exit_code == 0
    assert "borrow_records: 0 row(s) updated" in result.output


def test_cli_rewrites_hyphenated_book_ids(app, reader):
    legacy_id = str(uuid.uuid4())
    db.session.add(Book(id=legacy_id, title="Solaris", author="Stanislaw Lem", copies=1, total_copies=1))
    db.session.commit()
    BorrowService.borrow_book(reader, legacy_id)

    result = app.test_cli_runner().invoke(args=["ids", "normalize"])

    assert result.exit_code == 0
    assert "books: 1 row(s) updated" in result.output
    db.session.expunge_all()
    book = db.session.get(Book, uuid.UUID(legacy_id).hex)
    assert book is not None
    assert book.copies == 0
    assert db.session.get(Book, legacy_id) is None
