"""
Service-layer exception hierarchy.

Policy queries never raise; services that *enforce* the policy raise the
types below so a host application can register one error handler per type
and return consistent form errors.

Usage:
    from taskflow.core.exceptions import ValidationError

    raise ValidationError("Comment is required", details={"comment": "..."})
"""


class ValidationError(Exception):
    """Raised when well-formed input violates a business rule.

    Maps to HTTP 422 in the error handlers unless a subclass says otherwise.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for form errors.
                 Keys are field names; values are error descriptions.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)
