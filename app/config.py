import os

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key")

    SQLALCHEMY_DATABASE_URI = os.getenv("SQLALCHEMY_DATABASE_URI", "sqlite:///library.db")

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "jwt-super-secret")

    # Circulation policy (deployment-wide, not per reader)
    LOAN_DAYS = int(os.getenv("LOAN_DAYS", "30"))
    RENEW_DAYS = int(os.getenv("RENEW_DAYS", "30"))
    BORROW_QUOTA = int(os.getenv("BORROW_QUOTA", "5"))
    BORROW_QUOTA_WINDOW_DAYS = int(os.getenv("BORROW_QUOTA_WINDOW_DAYS", "30"))
    MY_REQUESTS_LIMIT = int(os.getenv("MY_REQUESTS_LIMIT", "5"))
    OVERDUE_BLACKLIST_THRESHOLD = int(os.getenv("OVERDUE_BLACKLIST_THRESHOLD", "3"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
