from flask import current_app

from app.errors import NotFound, OutOfStock
from app.repositories.book_repo import BookRepo
from app.utils.identifiers import normalize_id


class InventoryService:
    """Per-title copy counts. Both operations are single UPDATE statements, never read-modify-write."""

    @staticmethod
    def decrement_on_borrow(book_id):
        book_id = normalize_id(book_id)
        if BookRepo.decrement_copies(book_id):
            return
        if BookRepo.get(book_id) is None:
            raise NotFound("Book not found")
        raise OutOfStock("No copies of this book are available")

    @staticmethod
    def increment_on_return(book_id) -> bool:
        # no double-return guard here; callers only reach this once per loan
        book_id = normalize_id(book_id)
        if BookRepo.increment_copies(book_id):
            return True
        # title removed from the catalog; the return itself still stands
        current_app.logger.warning(f"[InventoryService] book {book_id} not found, copies not incremented")
        return False
