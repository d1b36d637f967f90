"""
Centralized error handling for the application.

Every failure leaves the API in the same {'success': False, 'error': ...}
envelope: service exceptions carry their own status, HTTP errors raised by
Flask/Werkzeug get a fixed message per status code.
"""

from flask import Flask
from flask_wtf.csrf import CSRFError
from werkzeug.exceptions import HTTPException

from marketplace.logger import get_logger
from marketplace.services.base import ServiceError
from marketplace.utils import error_response

logger = get_logger(__name__)

HTTP_ERROR_MESSAGES = {
    400: 'Bad request',
    401: 'Login required',
    403: 'Access forbidden',
    404: 'Resource not found',
    405: 'Method not allowed',
    413: 'File size exceeds 10MB limit',
    429: 'Too many requests. Please try again later.',
}


def register_error_handlers(app: Flask) -> None:
    """Register centralized error handlers with the Flask app.

    Args:
        app: Flask application instance.
    """

    @app.errorhandler(ServiceError)
    def handle_service_error(error: ServiceError):
        """Validation, auth, not-found and database failures from services."""
        if error.status_code >= 500:
            logger.error(f"Service error: {error.message}")
        else:
            logger.warning(f"{type(error).__name__}: {error.message}")
        return error_response(error.message, error.status_code)

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error: CSRFError):
        logger.warning(f"CSRF rejected: {error.description}")
        return error_response(error.description, 400)

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        """Werkzeug HTTP errors (abort(), routing, oversized bodies)."""
        status = error.code or 500
        if status >= 500:
            logger.error(f"HTTP {status}: {error.description}")
            return error_response('An internal error occurred', status)
        message = HTTP_ERROR_MESSAGES.get(status, error.name)
        return error_response(message, status)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        """Anything unhandled becomes a generic 500 without internal details."""
        logger.error(f"Unexpected error: {error}", exc_info=True)
        return error_response('An unexpected error occurred', 500)
