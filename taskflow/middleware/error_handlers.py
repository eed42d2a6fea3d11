"""
App-wide error handlers for workflow policy violations.

Any view in the host application that calls check_status_change() can let
the exception propagate; the handlers below turn it into a form-error
response naming the offending field(s):

    TransitionNotPermittedError  → 409 ERR_TRANSITION_NOT_PERMITTED
    MissingTransitionFieldError  → 422 ERR_VALIDATION_REQUIRED
    ValidationError (other)      → 422 ERR_VALIDATION_INVALID
"""

import logging

from taskflow.core.exceptions import ValidationError
from taskflow.services.status_change import (
    MissingTransitionFieldError,
    TransitionNotPermittedError,
)
from taskflow.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def init_error_handlers(app):
    """Register workflow error handlers on the Flask app."""

    @app.errorhandler(TransitionNotPermittedError)
    def _handle_not_permitted(error: TransitionNotPermittedError):
        return api_error(E.TRANSITION_NOT_PERMITTED, error.reason, details=error.details)

    @app.errorhandler(MissingTransitionFieldError)
    def _handle_missing_field(error: MissingTransitionFieldError):
        return api_error(E.VALIDATION_REQUIRED, error.reason, status=422, details=error.details)

    @app.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        return api_error(E.VALIDATION_INVALID, str(error), status=422, details=error.details)

    @app.errorhandler(405)
    def _method_not_allowed(e):
        return {"error": "Method not allowed"}, 405

    @app.errorhandler(500)
    def _server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return api_error(E.INTERNAL, "Internal server error")
