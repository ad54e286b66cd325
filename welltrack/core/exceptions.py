"""Custom application exceptions.

Every exception carries the message that is returned to the client as
``{"error": message}`` and the HTTP status it maps to.
"""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class BadRequestException(AppException):
    """Malformed request (e.g. missing upload)."""

    def __init__(self, message: str = "Bad request"):
        super().__init__(message, status_code=400)


class UnauthorizedException(AppException):
    """Missing, invalid or expired credentials."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, status_code=401)


class ForbiddenException(AppException):
    """Authenticated, but not allowed to touch the resource."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, status_code=403)


class NotFoundException(AppException):
    """Resource absent or invisible to the caller."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class ConflictException(AppException):
    """Unique value already taken."""

    def __init__(self, message: str = "Conflict"):
        super().__init__(message, status_code=409)


class ValidationException(AppException):
    """Client-correctable validation failure."""

    def __init__(self, message: str = "Validation error"):
        super().__init__(message, status_code=422)
