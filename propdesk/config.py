import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    # Secret key for sessions / JWT
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret")

    # Database connection
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///propdesk.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT Configuration
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", SECRET_KEY)

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    CORS_ALLOWED_ORIGINS = os.environ.get("CORS_ALLOWED_ORIGINS", "")

    # Document storage
    UPLOAD_ROOT = os.environ.get("UPLOAD_ROOT", os.path.abspath("storage"))
    STORAGE_URL_PREFIX = os.environ.get("STORAGE_URL_PREFIX", "/media")
    MAX_UPLOAD_BYTES = int(os.environ.get("MAX_UPLOAD_BYTES", 10 * 1024 * 1024))
    # Leave headroom so oversized files reach the upload validator
    MAX_CONTENT_LENGTH = MAX_UPLOAD_BYTES + 6 * 1024 * 1024

    # List views
    LIST_PAGE_SIZE = int(os.environ.get("LIST_PAGE_SIZE", 12))
    LEASE_EXPIRY_WARNING_DAYS = int(os.environ.get("LEASE_EXPIRY_WARNING_DAYS", 30))

    # Portal accounts
    TEMP_PASSWORD_LENGTH = int(os.environ.get("TEMP_PASSWORD_LENGTH", 12))


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    JWT_SECRET_KEY = "test-jwt-secret-with-enough-length-for-hs256"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    LOG_LEVEL = "WARNING"
