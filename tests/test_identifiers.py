import uuid

import pytest
from sqlalchemy import update

from app.errors import ValidationError
from app.extensions import db
from app.models.borrow_record import BorrowRecord
from app.repositories.borrow_record_repo import BorrowRecordRepo
from app.utils.identifiers import normalize_id, id_variants, is_legacy

U = uuid.UUID("6f1c2a9e-3b4d-4e5f-8a7b-9c0d1e2f3a4b")


@pytest.mark.parametrize("raw", [
    U,
    U.hex,
    str(U),
    str(U).upper(),
    "{" + str(U) + "}",
    "urn:uuid:" + str(U),
    "  " + str(U) + " ",
])
def test_uuid_spellings_normalize_to_hex(raw):
    assert normalize_id(raw) == U.hex


def test_opaque_ids_are_stripped_strings():
    assert normalize_id(" r10001 ") == "r10001"
    assert normalize_id(42) == "42"


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_missing_identifier_is_rejected(raw):
    with pytest.raises(ValidationError):
        normalize_id(raw)


def test_variants():
    assert id_variants(str(U)) == [U.hex, str(U)]
    assert id_variants("r10001") == ["r10001"]


def test_is_legacy():
    assert is_legacy(str(U))
    assert not is_legacy(U.hex)
    assert not is_legacy("r10001")


def test_models_store_canonical_form(app):
    record = BorrowRecord.open(" r10001 ", str(U).upper(), 30)
    assert record.user_id == "r10001"
    assert record.book_id == U.hex


def test_lookup_matches_legacy_hyphenated_rows(app):
    record = BorrowRecordRepo.add(BorrowRecord.open("r10001", U, 30))
    db.session.commit()

    # row persisted before normalisation existed
    db.session.execute(
        update(BorrowRecord.__table__)
        .where(BorrowRecord.__table__.c.id == record.id)
        .values(book_id=str(U))
    )
    db.session.commit()

    for spelling in (U, U.hex, str(U), str(U).upper()):
        found = BorrowRecordRepo.find_active_by_user_and_book("r10001", spelling)
        assert found is not None
        assert found.id == record.id
