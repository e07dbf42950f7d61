import os

from dateutil.relativedelta import relativedelta

# Used only when JWT_SECRET is unset; create_app() logs a warning about it.
DEFAULT_JWT_SECRET = "dev-expense-tracker-secret"


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///expenses.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT Configuration
    JWT_SECRET_KEY = os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET)
    JWT_ACCESS_TOKEN_EXPIRES = relativedelta(years=1)
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_HEADER_NAME = "Authorization"
    JWT_HEADER_TYPE = "Bearer"

    # CORS: comma separated, added to the built-in allow-list
    CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "")

    # Receipt images
    IMAGE_STORAGE = os.getenv("IMAGE_STORAGE", "local")
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")
    MAX_IMAGE_BYTES = 5 * 1024 * 1024
    # Whole request; leaves room for the form fields next to the image
    MAX_CONTENT_LENGTH = 6 * 1024 * 1024

    CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
    CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
    CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")
    CLOUDINARY_FOLDER = os.getenv("CLOUDINARY_FOLDER", "expenses")

    # Number of trusted reverse proxies setting X-Forwarded-*
    PROXY_FIX_HOPS = int(os.getenv("PROXY_FIX_HOPS", "1"))

    JSON_SORT_KEYS = False
    API_PREFIX = "/api"


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET_KEY = "test-secret-key-with-enough-bytes-for-hs256"
    IMAGE_STORAGE = "local"
