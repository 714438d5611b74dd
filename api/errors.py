from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError

from services.errors import ShopError
from utils.logging import get_logger

logger = get_logger(__name__)


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def _log_in_debug(err):
    if current_app and current_app.debug:
        logger.exception("Unhandled exception", exc_info=err)


def register_error_handlers(app):
    # Service failures carry their own code and status
    @app.errorhandler(ShopError)
    def handle_shop_error(err: ShopError):
        if err.status >= 500:
            logger.error("%s: %s", err.code, err.message)
        return error_response(err.code, err.message, err.status, details=err.details)

    # 400 Bad Request (generic)
    @app.errorhandler(400)
    def bad_request(e):
        _log_in_debug(e)
        message = getattr(e, "description", "Bad request")
        return error_response("BAD_REQUEST", message, 400)

    # 404 Not Found
    @app.errorhandler(404)
    def not_found(e):
        message = getattr(e, "description", None) or "Resource not found"
        return error_response("NOT_FOUND", message, 404)

    # 405 Method Not Allowed
    @app.errorhandler(405)
    def method_not_allowed(e):
        return error_response("METHOD_NOT_ALLOWED", "Method not allowed", 405)

    # 409 Conflict
    @app.errorhandler(409)
    def conflict(e):
        message = getattr(e, "description", "Conflict")
        return error_response("CONFLICT", message, 409)

    # 422 Unprocessable Entity (validation)
    @app.errorhandler(422)
    def unprocessable(e):
        message = getattr(e, "description", "Unprocessable entity")
        return error_response("VALIDATION_ERROR", message, 422)

    # Marshmallow validation errors map to 422
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        return error_response("VALIDATION_ERROR", "Invalid input", 422, details=err.messages)

    # Integrity errors that escaped a service (unique constraints, FK violations)
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        message = str(getattr(err, "orig", err))
        lower_msg = message.lower()
        _log_in_debug(err)
        if "unique constraint" in lower_msg or "unique violation" in lower_msg:
            return error_response("CONFLICT", "Unique constraint violated.", 409)
        if "foreign key constraint" in lower_msg:
            return error_response("BAD_REQUEST", "Foreign key constraint failed.", 400)
        return error_response("BAD_REQUEST", "Integrity error.", 400)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return error_response(err.name.upper().replace(" ", "_"), err.description, err.code or 400)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        details = None
        logger.exception("Unhandled exception", exc_info=err)
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
