"""
Exception taxonomy for the content API.

Every error a service raises intentionally derives from ApiError and carries the
HTTP status and wire code it is rendered with.
"""

from __future__ import annotations

from typing import Optional


class ApiError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[dict] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationFailedError(ApiError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Validation failed"

    def __init__(self, fields: dict[str, str], message: Optional[str] = None):
        super().__init__(message, details=dict(fields))
        self.fields = dict(fields)


class UnauthorizedError(ApiError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authentication required"

    def __init__(self):
        # One message for every rejection cause.
        super().__init__(self.default_message)


class NotFoundError(ApiError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class MethodNotAllowedError(ApiError):
    status_code = 405
    code = "METHOD_NOT_ALLOWED"
    default_message = "Method Not Allowed"


class RateLimitedError(ApiError):
    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"
    default_message = "Too many submissions. Please try again later."


class InvalidFileTypeError(ApiError):
    status_code = 400
    code = "INVALID_FILE_TYPE"
    default_message = "Invalid file type. Only JPEG, PNG, and WebP images are allowed."


class FileTooLargeError(ApiError):
    status_code = 400
    code = "FILE_TOO_LARGE"
    default_message = "File size exceeds 5MB limit"


class InvalidFolderError(ApiError):
    status_code = 400
    code = "INVALID_FOLDER"
    default_message = "Invalid folder. Allowed folders: projects, profile, temp"


class StoreError(ApiError):
    """The persistence collaborator failed or was unreachable."""

    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"
    retryable = True
