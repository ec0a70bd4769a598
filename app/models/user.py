from datetime import datetime
from app.extensions import db

class User(db.Model):
    """Reader directory row. Accounts and credentials live in the auth service."""
    __tablename__ = "users"

    id = db.Column(db.String(64), primary_key=True)  # reader id, e.g. "r10001"
    name = db.Column(db.String(120), nullable=False, default="")
    role = db.Column(db.String(20), nullable=False, default="Reader")  # Reader/Administrator

    overdue_count = db.Column(db.Integer, nullable=False, default=0)
    is_blacklisted = db.Column(db.Boolean, nullable=False, default=False)
    blacklist_reason = db.Column(db.String(255), nullable=False, default="")

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
