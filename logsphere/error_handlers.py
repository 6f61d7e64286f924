from flask import Blueprint, current_app
from flask_wtf.csrf import CSRFError
from google.api_core import exceptions as google_exceptions

from .core.responses import api_error
from .errors import AppError, MalformedDocumentError, NotFoundError, ValidationError

error_handlers_bp = Blueprint("error_handlers", __name__)


@error_handlers_bp.app_errorhandler(ValidationError)
def handle_validation_error(error):
    """Handles validation errors, including log date and week checks."""
    current_app.logger.warning(f"Validation Error: {error.message}")
    return api_error(error.message, error.status_code)


@error_handlers_bp.app_errorhandler(NotFoundError)
def handle_not_found_error(error):
    """Handles not found errors."""
    current_app.logger.warning(f"Not Found Error: {error.message}")
    return api_error(error.message, error.status_code)


@error_handlers_bp.app_errorhandler(MalformedDocumentError)
def handle_malformed_document_error(error):
    """Handles stored documents that failed to decode."""
    current_app.logger.error(f"Malformed Document: {error.message}")
    return api_error("Stored data is corrupted. Please contact an admin.", 500)


@error_handlers_bp.app_errorhandler(AppError)
def handle_app_error(error):
    """Handles generic application errors."""
    if error.status_code >= 500:
        current_app.logger.error(f"Application Error: {error.message}")
    else:
        current_app.logger.warning(f"Application Error: {error.message}")
    return api_error(error.message, error.status_code)


@error_handlers_bp.app_errorhandler(404)
def handle_404(e):
    """Handles generic 404 errors for routes that don't exist."""
    return api_error("Not found.", 404)


@error_handlers_bp.app_errorhandler(405)
def handle_405(e):
    """Handles requests with an unsupported method."""
    return api_error("Method not allowed.", 405)


@error_handlers_bp.app_errorhandler(500)
def handle_500(e):
    """Handles unexpected server errors."""
    current_app.logger.error(f"Internal Server Error: {e}")
    return api_error("An unexpected error occurred.", 500)


@error_handlers_bp.app_errorhandler(google_exceptions.GoogleAPICallError)
def handle_db_error(e):
    """Handles Firestore errors."""
    current_app.logger.error(f"Database Error: {e}")
    # Avoid exposing raw database error details to the user
    return api_error("A database error occurred. Please try again later.", 503)


@error_handlers_bp.app_errorhandler(CSRFError)
def handle_csrf_error(e):
    """
    Handles CSRF errors, which usually indicate a session timeout or a
    request sent without the X-CSRFToken header.
    """
    current_app.logger.warning(f"CSRF Error: {e.description}")
    return api_error("Your session may have expired. Please try again.", 400)
