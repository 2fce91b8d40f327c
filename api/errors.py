from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
import logging

from utils.security import HashingError, TokenError


class APIError(Exception):
    """Base for errors raised by the session coordinator; rendered with their own status."""
    status = 500
    error = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(APIError):
    status = 400
    error = "BAD_REQUEST"


class UnauthorizedError(APIError):
    status = 401
    error = "UNAUTHORIZED"


class InternalServerError(APIError):
    pass


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def _log_in_debug(err):
    if current_app and current_app.debug:
        logging.exception("Unhandled exception", exc_info=err)


def register_error_handlers(app):
    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        if err.status >= 500:
            logging.error("%s: %s", err.__class__.__name__, err.message)
        return error_response(err.error, err.message, err.status)

    # Access token failures (bad signature, expiry, garbage) are all 401
    @app.errorhandler(TokenError)
    def handle_token_error(err: TokenError):
        return error_response("UNAUTHORIZED", str(err), 401)

    @app.errorhandler(HashingError)
    def handle_hashing_error(err: HashingError):
        logging.exception("Password hashing failed", exc_info=err)
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500)

    # Marshmallow validation errors: missing or malformed client input
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        _log_in_debug(err)
        return error_response("BAD_REQUEST", "Missing required fields", 400, details=err.messages)

    # 404 Not Found
    @app.errorhandler(404)
    def not_found(e):
        return error_response("NOT_FOUND", "Resource not found", 404)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return error_response(err.name.upper().replace(" ", "_"), err.description, err.code or 400)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        # In dev, include exception details to speed up debugging
        details = None
        logging.exception("Unhandled exception", exc_info=err)
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
