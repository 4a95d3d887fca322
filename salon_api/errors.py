"""Typed application errors mapped to HTTP responses in main.py"""

from typing import Optional


class AppError(Exception):
    status_code = 500
    default_message = "Unexpected server error."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or semantically invalid input"""

    status_code = 400
    default_message = "Invalid request."

    def __init__(self, message: Optional[str] = None, errors: Optional[list[str]] = None):
        self.errors = list(errors or [])
        if message is None and self.errors:
            message = ", ".join(self.errors)
        super().__init__(message)


class FormatError(ValidationError):
    """A value does not match its expected textual format"""


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found."


class ConflictError(AppError):
    status_code = 409
    default_message = "This time slot is already booked. Please choose another time."


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Not authenticated."


class AuthorizationError(AppError):
    status_code = 403
    default_message = "Access denied."


class InternalError(AppError):
    status_code = 500
    default_message = "Unexpected server error. Please try again."
