"""
Input Validators and Sanitizers

This module provides validation and sanitization functions for user inputs.
These functions help prevent security issues and ensure data integrity.

Security Considerations:
- Only http/https targets can be shortened (no javascript:, data:, ftp:)
- Short codes are restricted to the alphabet the generator produces
- Length limits prevent DoS attacks
"""

import re
from typing import Optional
from urllib.parse import urlparse

from shortlink.core.exceptions import ValidationError

MAX_URL_LENGTH = 2048

SHORT_CODE_PATTERN = re.compile(r"^[0-9a-zA-Z]{4,8}$")

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MIN_PASSWORD_LENGTH = 8
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def is_valid_url(url: str) -> bool:
    """
    Check that a string is an absolute http:// or https:// URL.

    The candidate is trimmed first. No network access is made.

    Args:
        url: The URL string to validate

    Returns:
        True if valid, False otherwise
    """
    if not url or not isinstance(url, str):
        return False

    candidate = url.strip()
    if not candidate or len(candidate) > MAX_URL_LENGTH:
        return False

    if not candidate.startswith(("http://", "https://")):
        return False

    if any(char.isspace() for char in candidate):
        return False

    try:
        result = urlparse(candidate)
        # Accessing .port validates it (raises ValueError when out of range)
        result.port
    except ValueError:
        return False

    if result.scheme not in ("http", "https"):
        return False

    return bool(result.hostname)


def sanitize_short_code(short_code: str) -> Optional[str]:
    """
    Sanitize and validate short code format.

    Short codes are 4-8 characters from [0-9a-zA-Z], the same
    alphabet the generator encodes with.

    Args:
        short_code: The short code to sanitize

    Returns:
        Sanitized short code if valid, None otherwise
    """
    if not short_code or not isinstance(short_code, str):
        return None

    short_code = short_code.strip()

    if not SHORT_CODE_PATTERN.match(short_code):
        return None

    return short_code


def validate_credentials(email: Optional[str], password: Optional[str]) -> None:
    """
    Validate registration input.

    Raises:
        ValidationError: with a message fit to show the user
    """
    if not email or not password:
        raise ValidationError("Email and password are required")

    if not EMAIL_PATTERN.match(email.strip()):
        raise ValidationError("Invalid email or password format")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )

    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes long"
        )
