"""
Domain exceptions raised by services and translated to HTTP responses
by the handlers in middleware/errors.py.
"""
from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base class for errors that carry an HTTP status and a machine code."""
    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input; `errors` holds field-level detail."""
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Validation error"


class NoCriteria(ValidationError):
    code = "NO_CRITERIA"
    default_message = "At least one search criterion is required"


class Unauthenticated(AppError):
    status_code = 401
    code = "UNAUTHENTICATED"
    default_message = "Not authenticated - please log in"


class InvalidCredentials(Unauthenticated):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid username or password"


class Forbidden(AppError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "You do not have permission to perform this action"


class AccountSuspended(Forbidden):
    code = "ACCOUNT_SUSPENDED"
    default_message = "This account is suspended"


class NotFound(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class Conflict(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Conflict with existing data"


class DuplicateUsername(Conflict):
    code = "DUPLICATE_USERNAME"
    default_message = "A user with this username already exists"


class DuplicateCedula(Conflict):
    code = "DUPLICATE_CEDULA"
    default_message = "A detainee with this cedula is already registered"


class SessionConflict(Conflict):
    code = "SESSION_CONFLICT"
    default_message = "This account already has an active session elsewhere"


class SelfActionDenied(AppError):
    status_code = 400
    code = "SELF_ACTION_DENIED"
    default_message = "You cannot perform this action on your own account"


class ServerError(AppError):
    pass
