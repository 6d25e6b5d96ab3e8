import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "default-secret-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{BASE_DIR / 'stash.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "admin123")
    TOKEN_TTL_SECONDS = int(os.environ.get("TOKEN_TTL_SECONDS", str(7 * 24 * 3600)))
    TITLE_FETCH_TIMEOUT = float(os.environ.get("TITLE_FETCH_TIMEOUT", "5"))
    TITLE_MAX_BYTES = int(os.environ.get("TITLE_MAX_BYTES", "1000000"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    ADMIN_USERNAME = "admin"
    ADMIN_PASSWORD = "secret"


class ClientConfig:
    STASH_URL = os.environ.get("STASH_URL", "http://localhost:3000")
    REQUEST_TIMEOUT = float(os.environ.get("STASH_REQUEST_TIMEOUT", "10"))
    INITIAL_LIMIT = int(os.environ.get("STASH_INITIAL_LIMIT", "20"))
    PAGE_SIZE = int(os.environ.get("STASH_PAGE_SIZE", "20"))
    REVEAL_STEP = int(os.environ.get("STASH_REVEAL_STEP", "10"))
    BACKGROUND_DELAY = float(os.environ.get("STASH_BACKGROUND_DELAY", "0.1"))
    SEARCH_DEBOUNCE = float(os.environ.get("STASH_SEARCH_DEBOUNCE", "0.3"))
    FUZZY_THRESHOLD = float(os.environ.get("STASH_FUZZY_THRESHOLD", "0.3"))
