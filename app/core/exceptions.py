"""Custom exception classes for the School Portal API."""
from typing import Optional, Dict, Any


class SchoolPortalException(Exception):
    """Base exception for all application-specific exceptions."""

    status_code: int = 400

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(SchoolPortalException):
    """Missing or invalid fields in a request."""
    status_code = 400


class AuthenticationError(SchoolPortalException):
    """Missing, invalid or expired session token."""
    status_code = 401


class InvalidTokenError(AuthenticationError):
    """Raised by the token service when a token cannot be trusted."""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Login attempt with a wrong username or password."""
    pass


class NotFoundError(SchoolPortalException):
    """Exception raised when a resource is not found."""
    status_code = 404


class DatabaseError(SchoolPortalException):
    """Exception raised for storage failures."""
    status_code = 500


class ConfigurationError(SchoolPortalException):
    """Exception raised for configuration errors."""
    status_code = 500


def sanitize_error_message(error: Exception, include_details: bool = False) -> str:
    """
    Sanitize error messages to prevent leaking sensitive information.

    Args:
        error: The exception to sanitize
        include_details: Whether to include detailed error information (dev only)

    Returns:
        Sanitized error message
    """
    from app.core.config import settings

    if isinstance(error, SchoolPortalException):
        return error.message

    debug = bool(settings and settings.DEBUG)
    error_str = str(error)
    error_lower = error_str.lower()

    sensitive_patterns = [
        'password',
        'secret',
        'key',
        'token',
        'credential',
        'auth',
        'connection',
        'database',
        'sql',
        'query',
    ]

    if not debug and any(pattern in error_lower for pattern in sensitive_patterns):
        if 'password' in error_lower or 'credential' in error_lower:
            return "Authentication failed. Please check your credentials."
        elif 'connection' in error_lower or 'database' in error_lower:
            return "Database connection error. Please try again later."
        elif 'token' in error_lower or 'auth' in error_lower:
            return "Authentication error. Please login again."
        return "Internal server error"

    if debug or include_details:
        return f"{type(error).__name__}: {error_str}"
    return "Internal server error"
