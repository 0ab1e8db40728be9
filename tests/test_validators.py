"""Tests for URL, short code and credential validation."""

import pytest

from shortlink.core.exceptions import ValidationError
from shortlink.core.validators import is_valid_url, sanitize_short_code, validate_credentials


class TestURLValidation:
    """Test URL validation function."""

    def test_valid_urls(self):
        """Absolute http/https URLs pass, including query strings and fragments."""
        valid_urls = [
            "http://example.com",
            "https://example.com",
            "https://www.example.com/path/to/page",
            "http://subdomain.example.com:8080/path?query=value",
            "https://example.com/search?q=a+b&lang=en#results",
            "http://localhost:3000/",
            "https://192.168.0.1/admin",
            "  https://example.com/padded  ",
        ]
        for url in valid_urls:
            assert is_valid_url(url), f"Should be valid: {url}"

    def test_invalid_urls(self):
        """Relative, malformed and non-http(s) URLs are rejected."""
        invalid_urls = [
            "not-a-url",
            "ftp://example.com",
            "javascript:alert(1)",
            "data:text/html,hello",
            "mailto:user@example.com",
            "example.com",
            "/relative/path",
            "",
            "   ",
            "http://",
            "https://",
            "HTTP//example.com",
            "http://exa mple.com",
            "http://example.com:99999",
            "http://[::1",
        ]
        for url in invalid_urls:
            assert not is_valid_url(url), f"Should be invalid: {url}"

    def test_non_string_input(self):
        assert not is_valid_url(None)
        assert not is_valid_url(12345)

    def test_overlong_url_rejected(self):
        assert not is_valid_url("https://example.com/" + "a" * 2100)


class TestShortCodeSanitizing:

    def test_accepts_alphanumeric_codes(self):
        assert sanitize_short_code("aB3d") == "aB3d"
        assert sanitize_short_code("Zz09Yy87") == "Zz09Yy87"
        assert sanitize_short_code(" abcd ") == "abcd"

    @pytest.mark.parametrize("code", ["", "abc", "abcdefghi", "ab-cd", "ab cd", "../etc", "favicon.ico"])
    def test_rejects_malformed_codes(self, code):
        assert sanitize_short_code(code) is None


class TestCredentialValidation:

    def test_valid_credentials(self):
        validate_credentials("user@example.com", "password123")

    def test_missing_fields(self):
        with pytest.raises(ValidationError, match="Email and password are required"):
            validate_credentials("", "password123")
        with pytest.raises(ValidationError, match="Email and password are required"):
            validate_credentials("user@example.com", None)

    def test_short_password(self):
        with pytest.raises(ValidationError, match="at least 8 characters"):
            validate_credentials("user@example.com", "short")

    def test_password_over_bcrypt_limit(self):
        with pytest.raises(ValidationError, match="at most 72 bytes"):
            validate_credentials("user@example.com", "x" * 73)

    def test_bad_email(self):
        with pytest.raises(ValidationError):
            validate_credentials("not-an-email", "password123")
