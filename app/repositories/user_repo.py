from app.models.user import User
from app.extensions import db

class UserRepo:
    @staticmethod
    def get_by_id(user_id: str):
        return db.session.get(User, user_id)

    @staticmethod
    def count_readers() -> int:
        return User.query.filter_by(role="Reader").count()
