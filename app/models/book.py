from datetime import datetime
from app.extensions import db
from app.utils.identifiers import new_id

class Book(db.Model):
    __tablename__ = "books"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    title = db.Column(db.String(200), nullable=False, index=True)
    author = db.Column(db.String(200), nullable=False, index=True)
    category = db.Column(db.String(100), nullable=False, default="", index=True)

    copies = db.Column(db.Integer, nullable=False, default=5)
    total_copies = db.Column(db.Integer, nullable=False, default=5)
    borrow_count = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def is_available(self) -> bool:
        return (self.copies or 0) > 0
