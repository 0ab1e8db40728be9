"""
Short Code Generator

Produces short alphanumeric codes from random integers.

Design Decisions:
- Random integer from [1000, 99999999] drawn with the `secrets` CSPRNG
- Salted integer -> string encoding via hashids (62-char alphabet)
- Output clipped to 8 characters; hashids pads to a minimum of 4
- No uniqueness check here: the database unique index on short_code is the
  source of truth and the URL service retries on conflict
"""

import secrets
import string

from hashids import Hashids

ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits

MIN_NUMBER = 1000  # 4 digits
MAX_NUMBER = 99999999  # 8 digits
MIN_LENGTH = 4
MAX_LENGTH = 8


class ShortCodeGenerator:
    """Generate salted short codes for new URLs."""

    def __init__(self, salt: str = "url-shortner"):
        self.salt = salt
        self._hashids = Hashids(salt=salt, min_length=MIN_LENGTH, alphabet=ALPHABET)

    def encode(self, number: int) -> str:
        """Encode a number, clipped to MAX_LENGTH characters."""
        return self._hashids.encode(number)[:MAX_LENGTH]

    def generate(self) -> str:
        number = MIN_NUMBER + secrets.randbelow(MAX_NUMBER - MIN_NUMBER + 1)
        return self.encode(number)
