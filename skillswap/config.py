import logging
import os
from datetime import timedelta

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables from .env (only for local development)
if os.getenv("FLASK_ENV") != "production":
    load_dotenv()
    logger.debug("Loaded .env file for local development.")


class Config:
    """Base configuration."""

    # General settings
    SECRET_KEY = os.getenv("SECRET_KEY", "default-secret-key")

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///skillswap.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", os.getenv("ACCESS_TOKEN_SECRET", "default-jwt-secret-key"))
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)

    # Public URL of the frontend, used to build links in emails
    BASE_URL = os.getenv("BASE_URL", "http://localhost:5000")

    # Password reset links stay valid this long
    RESET_TOKEN_MINUTES = int(os.getenv("RESET_TOKEN_MINUTES", "10"))

    # Mail delivery: "log", "sendgrid" or "ses"
    MAIL_BACKEND = os.getenv("MAIL_BACKEND", "log")
    MAIL_FROM = os.getenv("MAIL_FROM", "noreply@skillswap.local")
    MAIL_FROM_NAME = os.getenv("MAIL_FROM_NAME", "SkillSwap")
    SENDGRID_API_KEY = os.getenv("SENDGRID_API_KEY")

    # AWS SES configuration
    AWS_ACCESS_KEY = os.getenv("AWS_ACCESS_KEY")
    AWS_SECRET_KEY = os.getenv("AWS_SECRET_KEY")
    AWS_REGION = os.getenv("AWS_REGION", "us-east-1")

    # CORS configuration
    CORS_ORIGINS = [
        origin.strip() for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin.strip()
    ] or "*"

    # Directory holding the built React app; the catch-all route is skipped when unset
    FRONTEND_DIR = os.getenv("FRONTEND_DIR")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Debug mode
    DEBUG = os.getenv("FLASK_ENV") != "production"


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SECRET_KEY = "test-secret-key"
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-bytes"
    BCRYPT_LOG_ROUNDS = 4
    MAIL_BACKEND = "log"
    BASE_URL = "http://skillswap.test"
    CORS_ORIGINS = "*"
    FRONTEND_DIR = None
    LOG_LEVEL = "DEBUG"
