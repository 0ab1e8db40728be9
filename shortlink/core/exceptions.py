"""
Custom Exceptions

Every domain failure is a URLShortenerException tagged with an ErrorKind.
The named subclasses only fix the tag; translation to HTTP status codes
happens once, at the API boundary (shortlink.api.errors).
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Closed set of failure kinds the services can report."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    GENERATION_EXHAUSTED = "generation_exhausted"
    DUPLICATE_USER = "duplicate_user"
    AUTHENTICATION = "authentication"
    INTERNAL = "internal"


class InsertOutcome(str, Enum):
    """Result of a single short URL insert attempt."""
    CREATED = "created"
    CONFLICT = "conflict"


class URLShortenerException(Exception):
    """Base exception for the URL shortener service."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        if kind is not None:
            self.kind = kind
        self.message = message
        super().__init__(message)


class ValidationError(URLShortenerException):
    """Raised when user input (URL, credentials) is rejected."""
    kind = ErrorKind.VALIDATION


class NotFoundError(URLShortenerException):
    """Raised for unknown short codes and URLs not owned by the caller."""
    kind = ErrorKind.NOT_FOUND


class GenerationExhaustedError(URLShortenerException):
    """Raised when every short code attempt collided with an existing one."""
    kind = ErrorKind.GENERATION_EXHAUSTED


class DuplicateUserError(URLShortenerException):
    """Raised when registering an email that already has an account."""
    kind = ErrorKind.DUPLICATE_USER


class AuthenticationError(URLShortenerException):
    """Raised for bad credentials and invalid or expired tokens."""
    kind = ErrorKind.AUTHENTICATION

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class DatabaseError(URLShortenerException):
    """Raised when database operations fail."""
    kind = ErrorKind.INTERNAL

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
