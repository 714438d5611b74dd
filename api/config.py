"""
Environment-aware configuration.
Secrets, token lifetimes, cookie flags and CORS come from the environment
(.env is read if present); each environment gets its own class.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # jwt: two secrets, access and refresh tokens are never interchangeable
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "dev-access-secret-change-me-0123456789")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "dev-refresh-secret-change-me-0123456789")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "storefront-api")
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", str(12 * 3600))))
    REFRESH_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("REFRESH_TOKEN_EXPIRES_SECONDS", str(7 * 24 * 3600))))

    # session cookies
    ACCESS_COOKIE_NAME = "access_token"
    REFRESH_COOKIE_NAME = "refresh_token"
    COOKIE_SECURE = _flag("COOKIE_SECURE", "false")
    COOKIE_HTTPONLY = _flag("COOKIE_HTTPONLY", "true")
    COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "Strict")

    # True: reading a cart that was never created is a 404 instead of an empty cart
    CART_STRICT_READ = _flag("CART_STRICT_READ", "false")


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class TestingConfig(BaseConfig):
    TESTING = True
    JWT_ACCESS_SECRET = "test-access-secret-0123456789abcdef"
    JWT_REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"


class ProductionConfig(BaseConfig):
    DEBUG = False
    COOKIE_SECURE = _flag("COOKIE_SECURE", "true")


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
