"""
Error taxonomy shared by the session, cart and admin services.

Every failure carries a machine-readable ``code`` (what clients branch on)
and an HTTP ``status``; the message is for humans only.
"""
from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from utils.logging import get_logger

logger = get_logger(__name__)


class ShopError(Exception):
    code = "ERROR"
    status = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None, details: dict | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class Unauthenticated(ShopError):
    code = "UNAUTHENTICATED"
    status = 401
    default_message = "Authentication required"


class Expired(ShopError):
    code = "TOKEN_EXPIRED"
    status = 401
    default_message = "Access token expired"


class InvalidSignature(ShopError):
    code = "INVALID_SIGNATURE"
    status = 401
    default_message = "Invalid refresh token"


class Revoked(ShopError):
    code = "TOKEN_REVOKED"
    status = 401
    default_message = "Refresh token is no longer valid"


class InvalidCredentials(ShopError):
    code = "INVALID_CREDENTIALS"
    status = 401
    default_message = "Invalid credentials"


class Forbidden(ShopError):
    code = "FORBIDDEN"
    status = 403
    default_message = "Insufficient role"


class NotFound(ShopError):
    code = "NOT_FOUND"
    status = 404
    default_message = "Resource not found"


class Conflict(ShopError):
    code = "CONFLICT"
    status = 409
    default_message = "Conflict"


class InsufficientStock(ShopError):
    code = "INSUFFICIENT_STOCK"
    status = 409

    def __init__(self, available: int, message: str | None = None):
        self.available = available
        super().__init__(
            message or f"Only {available} items available in stock",
            details={"available": available},
        )


class Validation(ShopError):
    code = "VALIDATION_ERROR"
    status = 422
    default_message = "Invalid input"


class InvalidRole(Validation):
    code = "INVALID_ROLE"
    default_message = "Invalid role specified"


class SelfModification(ShopError):
    code = "SELF_MODIFICATION"
    status = 400
    default_message = "Cannot modify your own account"


class Unavailable(ShopError):
    code = "SERVICE_UNAVAILABLE"
    status = 503
    default_message = "Storage is unavailable, try again later"


@contextmanager
def store_errors(session):
    """
    Translate storage failures into service errors.

    The session is rolled back first: pending objects are expunged and loaded
    ones expired, so nothing mutated in memory outlives the failed write.
    """
    try:
        yield
    except StaleDataError as exc:
        session.rollback()
        logger.warning("Concurrent modification detected: %s", exc)
        raise Conflict("The record was modified concurrently, retry the request") from exc
    except IntegrityError as exc:
        session.rollback()
        logger.warning("Integrity violation: %s", exc.orig)
        raise Conflict("Unique constraint violated") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Storage failure")
        raise Unavailable() from exc
