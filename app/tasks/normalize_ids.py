from __future__ import annotations

import click
from flask.cli import AppGroup
from sqlalchemy import select, update

from app.extensions import db
from app.models.book import Book
from app.models.borrow_history import BorrowHistory
from app.models.borrow_record import BorrowRecord
from app.models.borrow_request import BorrowRequest
from app.utils.identifiers import normalize_id, is_legacy

ID_COLUMNS = {
    Book: ("id",),
    BorrowRecord: ("id", "user_id", "book_id"),
    BorrowRequest: ("id", "user_id", "book_id", "record_id"),
    BorrowHistory: ("id", "user_id", "book_id"),
}


def normalize_legacy_ids(app) -> dict:
    """
    Rewrite identifiers persisted in a non-canonical spelling (e.g. hyphenated UUIDs).
    Core UPDATEs are used so append-only history rows can be migrated too.
    Returns {table_name: rows_changed}.
    """
    changed = {}
    with app.app_context():
        try:
            for model, columns in ID_COLUMNS.items():
                table = model.__table__
                count = 0
                rows = db.session.execute(select(*[table.c[c] for c in columns])).all()
                for row in rows:
                    values = {}
                    for c in columns:
                        raw = row._mapping[c]
                        if is_legacy(raw):
                            values[c] = normalize_id(raw)
                    if values:
                        db.session.execute(
                            update(table)
                            .where(table.c.id == row._mapping["id"])
                            .values(**values)
                        )
                        count += 1
                changed[model.__tablename__] = count
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            app.logger.exception(f"[normalize_ids] Failed, nothing written: {e}")
            raise

        app.logger.info(f"[normalize_ids] Identifiers normalized: {changed}")
    return changed


def register_cli(app):
    ids_cli = AppGroup("ids", help="Identifier maintenance.")

    @ids_cli.command("normalize")
    def normalize_command():
        """Rewrite legacy identifier spellings to canonical form."""
        for table, count in normalize_legacy_ids(app).items():
            click.echo(f"{table}: {count} row(s) updated")

    app.cli.add_command(ids_cli)
