import os


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key")

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///booklend.db")

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # connection lifetime of one hour, stale connections are pinged before use
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True, "pool_recycle": 3600}

    # Lending rules
    LOAN_MAX_DAYS = int(os.getenv("LOAN_MAX_DAYS", "30"))
    DEFAULT_LOAN_DAYS = int(os.getenv("DEFAULT_LOAN_DAYS", "14"))

    # Retry for transient store failures (seconds)
    STORE_RETRY_ATTEMPTS = int(os.getenv("STORE_RETRY_ATTEMPTS", "3"))
    STORE_RETRY_BACKOFF = float(os.getenv("STORE_RETRY_BACKOFF", "0.2"))

    # Inventory audit job; off unless the serving process sets SCHEDULER_ENABLED=1,
    # so flask CLI commands (init-db, db upgrade, audit-inventory) start no thread
    SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "0") == "1"
    AUDIT_INTERVAL_MINUTES = int(os.getenv("AUDIT_INTERVAL_MINUTES", "30"))
    AUDIT_REPAIR = os.getenv("AUDIT_REPAIR", "0") == "1"


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {
        "connect_args": {"check_same_thread": False, "timeout": 30},
    }
    SCHEDULER_ENABLED = False
    STORE_RETRY_BACKOFF = 0.01
